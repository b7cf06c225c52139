# skigram/schemas/like_schema.py
from marshmallow import Schema, fields, post_load, EXCLUDE

from skigram.models.like import Like

class LikeDocumentSchema(Schema):
    """Firestore 'likes' 문서 검증 및 Like 객체 변환 스키마."""
    class Meta:
        unknown = EXCLUDE

    like_id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    created_at = fields.Raw(load_default=None, allow_none=True)

    @post_load
    def make_like(self, data, **kwargs):
        return Like(**data)
