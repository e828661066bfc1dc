from marshmallow import Schema, fields, post_dump


class PaginationMetaSchema(Schema):
    """`meta` block of a cursor-paginated list; cursor only when hasMore."""

    cursor = fields.String(allow_none=True)
    has_more = fields.Boolean(data_key="hasMore", required=True)

    @post_dump
    def drop_empty_cursor(self, data, **kwargs):
        if data.get("cursor") is None:
            data.pop("cursor", None)
        return data
