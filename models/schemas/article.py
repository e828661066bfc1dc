from marshmallow import Schema, fields, validate

_title = validate.Length(min=3, max=200, error="Title must have between 3 and 200 characters")
_content = validate.Length(min=10, error="Content must have at least 10 characters")


class ArticleCreateSchema(Schema):
    title = fields.String(required=True, validate=_title)
    content = fields.String(required=True, validate=_content)


class ArticleUpdateSchema(Schema):
    title = fields.String(validate=_title)
    content = fields.String(validate=_content)


class ArticleOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    content = fields.String()
    author_id = fields.String(allow_none=True)
    author_name = fields.Method("get_author_name")
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

    def get_author_name(self, obj):
        author = getattr(obj, "author", None)
        return getattr(author, "name", None)
