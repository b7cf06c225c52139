# skigram/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from google.api_core.exceptions import AlreadyExists
from marshmallow import ValidationError

from skigram.api.posts.schemas import PostCreateSchema, PostResponseSchema, ActingUserSchema, FeedQuerySchema


posts_bp = Blueprint('posts_bp', __name__)

@posts_bp.route('', methods=['POST'])
def create_post():
    """
    새로운 게시글을 생성합니다.
    - 성공 시, 생성된 게시글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    try:
        data = PostCreateSchema().load(request.get_json(silent=True) or {})
        new_post = post_service.create_post(data['user_id'], data)
        return jsonify(PostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"게시글 생성 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "게시글 생성 중 오류가 발생했습니다."}), 500

@posts_bp.route('', methods=['GET'])
def get_feed():
    """
    게시글 피드 목록을 페이지네이션으로 조회합니다.
    - user_id 쿼리가 있으면 본인 + 팔로잉 사용자의 게시물만 반환합니다.
    - 팔로잉 피드는 최근에 팔로우한 29명 + 본인까지만 포함하며, 잘린 경우 partial이 true입니다.
    """
    post_service = current_app.services['posts']
    try:
        query = FeedQuerySchema().load(request.args)
        page = post_service.get_feed(query['user_id'], query['limit'], query['cursor'])
        return jsonify({
            "posts": PostResponseSchema(many=True).dump(page.items),
            "next_cursor": page.next_cursor,
            "has_more": page.has_more,
            "partial": page.partial
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"게시글 피드 조회 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "게시물 목록 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id: str):
    """
    특정 게시글의 상세 정보를 조회합니다.
    """
    post_service = current_app.services['posts']
    post = post_service.get_post_by_id(post_id)
    if not post:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": "게시물을 찾을 수 없습니다."}), 404
    return jsonify(PostResponseSchema().dump(post)), 200


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
def delete_post(post_id: str):
    """
    특정 게시글을 삭제합니다. (작성자 본인만 가능)
    - 이미지(원본+썸네일), 댓글, 좋아요도 함께 삭제됩니다.
    - 이미지 정리가 일부 실패해도 문서 삭제는 성공으로 처리합니다.
    """
    post_service = current_app.services['posts']
    try:
        data = ActingUserSchema().load(request.get_json(silent=True) or {})
        post_service.delete_post(post_id, data['user_id'])
        return Response(status=204) # 성공 시 내용 없이 204 No Content 반환
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except ValueError as e: # 게시물이 없는 경우
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('/<string:post_id>/like', methods=['POST'])
def like_post(post_id: str):
    """
    게시글에 좋아요를 누릅니다.
    """
    post_service = current_app.services['posts']
    try:
        data = ActingUserSchema().load(request.get_json(silent=True) or {})
        like = post_service.like_post(data['user_id'], post_id)
        return jsonify(like), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AlreadyExists:
        return jsonify({"error_code": "ALREADY_LIKED", "message": "이미 좋아요를 누른 게시물입니다."}), 409
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('/<string:post_id>/like', methods=['DELETE'])
def unlike_post(post_id: str):
    """
    게시글 좋아요를 취소합니다.
    """
    post_service = current_app.services['posts']
    try:
        data = ActingUserSchema().load(request.get_json(silent=True) or {})
        post_service.unlike_post(data['user_id'], post_id)
        return Response(status=204)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "LIKE_NOT_FOUND", "message": str(e)}), 404
