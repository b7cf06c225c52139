# skigram/triggers/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from skigram.triggers.dispatcher import DOCUMENT_SCHEMAS

class EventEnvelopeSchema(Schema):
    """
    POST /api/events
    이벤트 디스패처가 보내는 문서 변경 이벤트 한 건의 형식을 검사합니다.
    """
    event_id = fields.Str(load_default=None, allow_none=True)
    collection = fields.Str(required=True, validate=validate.OneOf(list(DOCUMENT_SCHEMAS)))
    document_id = fields.Str(required=True, validate=validate.Length(min=1))
    before = fields.Dict(load_default=None, allow_none=True)
    after = fields.Dict(load_default=None, allow_none=True)

    @validates_schema
    def validate_states(self, data, **kwargs):
        if data.get('before') is None and data.get('after') is None:
            raise ValidationError("before와 after 중 하나는 있어야 합니다.", "_schema")
