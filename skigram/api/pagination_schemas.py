# skigram/api/pagination_schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE
from flask import current_app

def _default_page_size():
    return current_app.config.get('DEFAULT_PAGE_SIZE', 10)

class PageQuerySchema(Schema):
    """목록 API 공통 쿼리 스트링(limit, cursor) 검증 스키마."""
    class Meta:
        unknown = EXCLUDE

    limit = fields.Int(load_default=_default_page_size, validate=validate.Range(min=1, max=50))
    cursor = fields.Str(load_default=None, allow_none=True)

class UserSummarySchema(Schema):
    """목록 응답에 병합되는 사용자 공개 정보."""
    user_id = fields.Str()
    username = fields.Str(allow_none=True)
    profile_image_url = fields.Str(allow_none=True)
