# skigram/schemas/post_schema.py
from marshmallow import Schema, fields, post_load, EXCLUDE

from skigram.models.post import Post, PostLocation

class PostLocationSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(required=True)
    coords = fields.Raw(load_default=None, allow_none=True)

    @post_load
    def make_location(self, data, **kwargs):
        return PostLocation(**data)

class PostDocumentSchema(Schema):
    """
    Firestore 'posts' 문서를 검증하고 Post 객체로 변환하는 스키마.
    필수 필드가 빠진 문서는 ValidationError로 거부됩니다.
    """
    class Meta:
        unknown = EXCLUDE

    post_id = fields.Str(required=True)
    author_id = fields.Str(required=True)
    image_urls = fields.List(fields.Str(), required=True)
    caption = fields.Str(load_default="")
    location = fields.Nested(PostLocationSchema, load_default=None, allow_none=True)
    tags = fields.List(fields.Str(), load_default=list)
    like_count = fields.Int(load_default=0)
    comment_count = fields.Int(load_default=0)
    # Firestore Timestamp 또는 ISO 문자열이 그대로 들어올 수 있어 Raw로 받습니다.
    created_at = fields.Raw(load_default=None, allow_none=True)
    updated_at = fields.Raw(load_default=None, allow_none=True)

    @post_load
    def make_post(self, data, **kwargs):
        return Post(**data)
