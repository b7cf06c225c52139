# skigram/api/users/schemas.py
from marshmallow import Schema, fields

from skigram.api.pagination_schemas import UserSummarySchema

class SkiStatsSchema(Schema):
    resort_count = fields.Int(dump_default=0)

class UserPublicResponseSchema(Schema):
    """
    GET /api/users/{user_id}
    다른 사용자의 프로필 정보를 응답할 때 사용하는 스키마.
    민감한 정보(email, fcm_token)는 제외하고 공개 가능한 정보만 포함합니다.
    """
    user_id = fields.Str(required=True, dump_only=True)
    username = fields.Str(required=True)
    bio = fields.Str(allow_none=True)
    profile_image_url = fields.Str(allow_none=True)
    follower_count = fields.Int(dump_default=0)
    following_count = fields.Int(dump_default=0)
    ski_stats = fields.Nested(SkiStatsSchema)

class FollowResponseSchema(Schema):
    """팔로워/팔로잉 목록의 항목. 상대 사용자의 공개 정보가 user에 병합됩니다."""
    follow_id = fields.Str()
    follower_id = fields.Str()
    following_id = fields.Str()
    user = fields.Nested(UserSummarySchema, allow_none=True)
    created_at = fields.DateTime(allow_none=True)
