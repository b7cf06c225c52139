# skigram/api/comments/schemas.py
from marshmallow import Schema, fields, validate

from skigram.api.pagination_schemas import UserSummarySchema

class CommentCreateSchema(Schema):
    """
    POST /api/posts/{post_id}/comments
    댓글 생성을 요청할 때의 데이터 형식을 정의하고 유효성을 검사합니다.
    """
    user_id = fields.Str(required=True)
    text = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="댓글은 1~1000자 사이여야 합니다."))

class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    """
    comment_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    author_id = fields.Str(required=True)
    user = fields.Nested(UserSummarySchema, allow_none=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(allow_none=True)
