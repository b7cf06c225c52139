# skigram/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from google.api_core.exceptions import AlreadyExists
from marshmallow import ValidationError

from skigram.api.pagination_schemas import PageQuerySchema
from skigram.api.posts.schemas import ActingUserSchema
from skigram.api.users.schemas import UserPublicResponseSchema, FollowResponseSchema

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('/<string:user_id>', methods=['GET'])
def get_user_profile(user_id: str):
    """특정 사용자의 공개 프로필 정보를 조회합니다."""
    user_service = current_app.services['users']
    try:
        user_profile = user_service.get_user_profile(user_id)
        if not user_profile:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404

        return jsonify(UserPublicResponseSchema().dump(user_profile)), 200
    except Exception as e:
        logging.error(f"사용자 프로필 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500


def _follow_list_response(user_id: str, key: str, fetch):
    try:
        query = PageQuerySchema().load(request.args)
        page = fetch(user_id, query['limit'], query['cursor'])
        return jsonify({
            key: FollowResponseSchema(many=True).dump(page.items),
            "next_cursor": page.next_cursor,
            "has_more": page.has_more
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"{key} 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "목록 조회 중 오류가 발생했습니다."}), 500


@users_bp.route('/<string:user_id>/followers', methods=['GET'])
def get_followers(user_id: str):
    """user_id를 팔로우하는 사용자 목록을 페이지네이션으로 조회합니다."""
    return _follow_list_response(user_id, "followers", current_app.services['users'].get_followers)


@users_bp.route('/<string:user_id>/following', methods=['GET'])
def get_following(user_id: str):
    """user_id가 팔로우하는 사용자 목록을 페이지네이션으로 조회합니다."""
    return _follow_list_response(user_id, "following", current_app.services['users'].get_following)


@users_bp.route('/<string:user_id>/follow', methods=['POST'])
def follow_user(user_id: str):
    """
    요청한 사용자(user_id 본문)가 경로의 사용자를 팔로우합니다.
    """
    user_service = current_app.services['users']
    try:
        data = ActingUserSchema().load(request.get_json(silent=True) or {})
        follow = user_service.follow_user(data['user_id'], user_id)
        return jsonify(follow), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AlreadyExists:
        return jsonify({"error_code": "ALREADY_FOLLOWING", "message": "이미 팔로우 중인 사용자입니다."}), 409
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": str(e)}), 404
    except ValueError as e: # 자기 자신 팔로우
        return jsonify({"error_code": "INVALID_FOLLOW", "message": str(e)}), 400


@users_bp.route('/<string:user_id>/follow', methods=['DELETE'])
def unfollow_user(user_id: str):
    """
    요청한 사용자(user_id 본문)가 경로의 사용자 팔로우를 취소합니다.
    """
    user_service = current_app.services['users']
    try:
        data = ActingUserSchema().load(request.get_json(silent=True) or {})
        user_service.unfollow_user(data['user_id'], user_id)
        return Response(status=204)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except LookupError as e:
        return jsonify({"error_code": "NOT_FOLLOWING", "message": str(e)}), 404
