from marshmallow import Schema, fields, validate, validates, ValidationError

from utils.exceptions import NotFound
from utils.permissions import PermissionCode, catalog

_name = validate.Length(min=1, max=100, error="Name must have between 1 and 100 characters")


class UserRegisterSchema(Schema):
    name = fields.String(required=True, validate=_name)
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 6:
            raise ValidationError("Password must have at least 6 characters")


class UserLoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class UserCreateSchema(UserRegisterSchema):
    permission_id = fields.Integer(
        required=True,
        strict=True,
        validate=validate.OneOf(
            [int(c) for c in PermissionCode],
            error="Permission ID must be 1 (READER), 2 (EDITOR) or 3 (ADMIN)",
        ),
    )


class UserUpdateSchema(Schema):
    name = fields.String(validate=_name)
    email = fields.Email()
    password = fields.String(load_only=True)
    permission_id = fields.Integer(
        strict=True,
        validate=validate.OneOf([int(c) for c in PermissionCode]),
    )

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 6:
            raise ValidationError("Password must have at least 6 characters")


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    name = fields.String()
    email = fields.String()
    permission_id = fields.Method("get_permission_id")
    permission_name = fields.Method("get_permission_name")
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

    # both are null when the permission row is missing
    def get_permission_id(self, obj):
        return obj.permission_code or None

    def get_permission_name(self, obj):
        code = self.get_permission_id(obj)
        if code is None:
            return None
        try:
            return catalog.lookup(code).name
        except NotFound:
            return None
