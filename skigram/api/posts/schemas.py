# skigram/api/posts/schemas.py
from marshmallow import Schema, fields, validate

from skigram.api.pagination_schemas import PageQuerySchema, UserSummarySchema

class LocationSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    coords = fields.Dict(load_default=None, allow_none=True)

class PostCreateSchema(Schema):
    """POST /api/posts 요청 본문의 유효성을 검사합니다."""
    user_id = fields.Str(required=True)
    image_urls = fields.List(fields.Str(), required=True, validate=validate.Length(min=1, max=10))
    caption = fields.Str(load_default="", validate=validate.Length(max=2000))
    location = fields.Nested(LocationSchema, load_default=None, allow_none=True)
    tags = fields.List(fields.Str(), load_default=list)

class ActingUserSchema(Schema):
    """요청을 보낸 사용자 ID. (인증 계층이 없으므로 클라이언트가 전달합니다)"""
    user_id = fields.Str(required=True, error_messages={"required": "user_id는 필수 항목입니다."})

class FeedQuerySchema(PageQuerySchema):
    """GET /api/posts 쿼리. user_id가 있으면 팔로잉 피드를 조회합니다."""
    user_id = fields.Str(load_default=None, allow_none=True)

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    author_id = fields.Str()
    author = fields.Nested(UserSummarySchema, allow_none=True)
    image_urls = fields.List(fields.Str())
    caption = fields.Str()
    location = fields.Dict(allow_none=True)
    tags = fields.List(fields.Str())
    like_count = fields.Int()
    comment_count = fields.Int()
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
