"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/logout
- GET  /me

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues access tokens (JWTs signed with HS256) that carry the user's permission code
- Logout blacklists the presented token, so it fails every later request
  even though its signature and expiry are still valid
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import UserRegisterSchema, UserLoginSchema, UserOutSchema

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()


def _auth_service():
    return current_app.extensions["auth_service"]


def _token_response(result, status: int):
    return jsonify(
        {
            "access_token": result.token,
            "token_type": "bearer",
            "expires_in": int(current_app.config["JWT_TOKEN_EXPIRES"].total_seconds()),
            "user": user_out_schema.dump(result.user),
        }
    ), status


@bp.post("/auth/register")
def register():
    """
    Register a new user (always created as reader) and log them in.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string, minLength: 1, maxLength: 100 }
            email: { type: string }
            password: { type: string, minLength: 6 }
    responses:
      201:
        description: Created (returns token and user)
      409:
        description: Email already exists
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_register_schema.load(payload)
    result = _auth_service().register(data["name"], data["email"], data["password"])
    return _token_response(result, 201)


@bp.post("/auth/login")
def login():
    """
    Login: return access_token and user
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns token)
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    result = _auth_service().login(data["email"], data["password"])
    return _token_response(result, 200)


@bp.post("/auth/logout")
def logout():
    """
    logout: revokes the bearer token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    claims = getattr(g, "token_claims", None)
    _auth_service().logout(
        getattr(g, "current_token", None),
        expires_at=claims.expires_at if claims else None,
    )
    return jsonify({"message": "Logged out successfully"}), 200


@bp.get("/me")
def me():
    """
    Get current user info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": user_out_schema.dump(g.current_user)}), 200
