from flask import Blueprint, jsonify, current_app

bp = Blueprint("permissions", __name__)


@bp.get("/permissions")
def list_permissions():
    """
    List permission levels
    ---
    tags:
      - Permissions
    security:
      - Bearer: []
    responses:
      200:
        description: OK
    """
    catalog = current_app.extensions["permission_catalog"]
    return jsonify(
        {
            "data": [
                {"code": int(p.code), "name": p.name, "description": p.description}
                for p in catalog
            ]
        }
    ), 200
