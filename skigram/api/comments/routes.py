# skigram/api/comments/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from marshmallow import ValidationError

from skigram.api.comments.schemas import CommentCreateSchema, CommentResponseSchema
from skigram.api.pagination_schemas import PageQuerySchema
from skigram.api.posts.schemas import ActingUserSchema


comments_bp = Blueprint('comments_bp', __name__)

@comments_bp.route('/posts/<string:post_id>/comments', methods=['POST'])
def create_comment(post_id: str):
    """
    특정 게시글에 새로운 댓글을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    - 댓글 수 증가와 게시물 작성자 알림은 트리거가 비동기로 처리합니다.
    """
    comment_service = current_app.services['comments']
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
        new_comment = comment_service.create_comment(post_id, data['user_id'], data['text'])
        return jsonify(CommentResponseSchema().dump(new_comment)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e: # 게시물이 없는 경우
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"댓글 생성 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": "댓글 생성 중 오류가 발생했습니다."}), 500

@comments_bp.route('/posts/<string:post_id>/comments', methods=['GET'])
def get_comments(post_id: str):
    """
    특정 게시글의 댓글 목록을 최신순 페이지네이션으로 조회합니다.
    """
    comment_service = current_app.services['comments']
    try:
        query = PageQuerySchema().load(request.args)
        page = comment_service.get_comments_for_post(post_id, query['limit'], query['cursor'])
        return jsonify({
            "comments": CommentResponseSchema(many=True).dump(page.items),
            "next_cursor": page.next_cursor,
            "has_more": page.has_more
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"댓글 목록 조회 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "댓글 목록 조회 중 오류가 발생했습니다."}), 500


@comments_bp.route('/posts/<string:post_id>/comments/<string:comment_id>', methods=['DELETE'])
def delete_comment(post_id: str, comment_id: str):
    """
    특정 댓글을 삭제합니다. (댓글 작성자 또는 게시물 작성자만 가능)
    - 게시물의 댓글 수는 트리거가 1 감소시킵니다.
    """
    comment_service = current_app.services['comments']
    try:
        data = ActingUserSchema().load(request.get_json(silent=True) or {})
        comment_service.delete_comment(post_id, comment_id, data['user_id'])
        return Response(status=204)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except ValueError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
