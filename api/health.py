from flask import Blueprint
from models import storage
from utils.exceptions import StorageUnavailable

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check (includes a database round-trip)
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            database:
              type: string
              example: ok
      503:
        description: Database unreachable
    """
    try:
        storage.ping()
    except StorageUnavailable:
        return {"status": "degraded", "database": "unavailable"}, 503
    return {"status": "ok", "database": "ok"}, 200
