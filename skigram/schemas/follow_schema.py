# skigram/schemas/follow_schema.py
from marshmallow import Schema, fields, post_load, EXCLUDE

from skigram.models.follow import Follow

class FollowDocumentSchema(Schema):
    """Firestore 'follows' 문서 검증 및 Follow 객체 변환 스키마."""
    class Meta:
        unknown = EXCLUDE

    follow_id = fields.Str(required=True)
    follower_id = fields.Str(required=True)
    following_id = fields.Str(required=True)
    created_at = fields.Raw(load_default=None, allow_none=True)

    @post_load
    def make_follow(self, data, **kwargs):
        return Follow(**data)
