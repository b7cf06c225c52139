# skigram/schemas/comment_schema.py
from marshmallow import Schema, fields, post_load, EXCLUDE

from skigram.models.comment import Comment

class CommentDocumentSchema(Schema):
    """Firestore 'comments' 문서 검증 및 Comment 객체 변환 스키마."""
    class Meta:
        unknown = EXCLUDE

    comment_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    author_id = fields.Str(required=True)
    text = fields.Str(required=True)
    created_at = fields.Raw(load_default=None, allow_none=True)

    @post_load
    def make_comment(self, data, **kwargs):
        return Comment(**data)
