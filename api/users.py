"""
Admin-only user management. Permission changes (e.g. promoting a reader
to editor) take effect on the user's next request; existing tokens are
not reissued because the gate reads the permission from storage.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from models import storage
from models.schemas.user import UserCreateSchema, UserUpdateSchema, UserOutSchema
from utils.exceptions import DuplicateEmail, NotFound

bp = Blueprint("users", __name__)

user_create_schema = UserCreateSchema()
user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def _get_user_or_404(user_id: str):
    user = storage.find_user_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@bp.post("/users")
def create_user():
    """
    Create a user with an explicit permission - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
            permission_id: { type: integer, enum: [1, 2, 3] }
    responses:
      201: { description: Created }
      403: { description: Forbidden - Admin access required }
      409: { description: Email already exists }
    """
    data = user_create_schema.load(request.get_json(silent=True) or {})
    user = current_app.extensions["auth_service"].create_user(
        data["name"], data["email"], data["password"], data["permission_id"]
    )
    return jsonify({"data": user_out_schema.dump(user)}), 201


@bp.get("/users")
def list_users():
    """
    List all active users - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      403: { description: Forbidden - Admin access required }
    """
    return jsonify({"data": user_list_out_schema.dump(storage.list_users())}), 200


@bp.get("/users/<user_id>")
def get_user(user_id: str):
    """
    Get user by id - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: User not found }
    """
    return jsonify({"data": user_out_schema.dump(_get_user_or_404(user_id))}), 200


@bp.patch("/users/<user_id>")
def update_user(user_id: str):
    """
    Update a user, including its permission - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
            permission_id: { type: integer, enum: [1, 2, 3] }
    responses:
      200: { description: OK }
      404: { description: User or permission not found }
      409: { description: Email already exists }
    """
    data = user_update_schema.load(request.get_json(silent=True) or {})
    user = _get_user_or_404(user_id)

    email = data.get("email")
    if email and email != user.email and storage.find_user_by_email(email) is not None:
        raise DuplicateEmail()

    if "permission_id" in data:
        permission = storage.find_permission_by_code(data["permission_id"])
        if permission is None:
            raise NotFound("Permission not found")
        user.permission_id = permission.id
        user.permission = permission

    if data.get("name"):
        user.name = data["name"]
    if email:
        user.email = email
    if data.get("password"):
        user.password_hash = current_app.extensions["password_verifier"].hash(data["password"])

    try:
        user.save()
    except IntegrityError:
        raise DuplicateEmail()
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.delete("/users/<user_id>")
def delete_user(user_id: str):
    """
    Soft delete a user - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: User not found }
    """
    _get_user_or_404(user_id).soft_delete()
    return ("", 204)
