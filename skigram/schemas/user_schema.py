# skigram/schemas/user_schema.py
from marshmallow import Schema, fields, post_load, EXCLUDE

from skigram.models.user import User, SkiStats

class SkiStatsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    resort_count = fields.Int(load_default=0)

    @post_load
    def make_stats(self, data, **kwargs):
        return SkiStats(**data)

class UserDocumentSchema(Schema):
    """
    Firestore 'users' 문서 검증 및 User 객체 변환 스키마.
    알림 발신자/수신자 정보를 읽을 때 사용합니다.
    """
    class Meta:
        unknown = EXCLUDE

    user_id = fields.Str(required=True)
    username = fields.Str(required=True)
    email = fields.Str(load_default=None, allow_none=True)
    bio = fields.Str(load_default="", allow_none=True)
    profile_image_url = fields.Str(load_default=None, allow_none=True)
    fcm_token = fields.Str(load_default=None, allow_none=True)
    follower_count = fields.Int(load_default=0)
    following_count = fields.Int(load_default=0)
    ski_stats = fields.Nested(SkiStatsSchema, load_default=SkiStats)

    @post_load
    def make_user(self, data, **kwargs):
        return User(**data)
