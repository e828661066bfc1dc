from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
import logging

from .access import OPERATION_PERMISSIONS, PUBLIC_BLUEPRINTS, PUBLIC_ENDPOINTS
from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from services.auth import AuthService
from utils.authorization import AuthorizationMiddleware
from utils.pagination import PaginationEngine
from utils.permissions import catalog
from utils.revocation import DatabaseRevocationStore
from utils.security import PasswordVerifier, TokenCodec

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Content API",
        "version": "1.0.0",
        "description": "REST API for articles with role-based permissions and revocable JWT sessions.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("contentapi").setLevel(level)


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
      - binds the storage singleton to the configured database
      - builds the auth components once and hands them to each other
      - installs the authorization gate in front of every view
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    configure_logging(app)

    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQLALCHEMY_ECHO", False))
    if app.config.get("SEED_PERMISSIONS_ON_STARTUP", True):
        storage.seed_permissions(catalog)
        storage.close()

    verifier = PasswordVerifier(
        time_cost=app.config["ARGON2_TIME_COST"],
        memory_cost=app.config["ARGON2_MEMORY_COST"],
        parallelism=app.config["ARGON2_PARALLELISM"],
    )
    codec = TokenCodec(
        secret=app.config["JWT_SECRET"],
        algorithm=app.config["JWT_ALGORITHM"],
        ttl=app.config["JWT_TOKEN_EXPIRES"],
        issuer=app.config["JWT_ISSUER"],
    )
    revocations = DatabaseRevocationStore(storage)

    app.extensions["password_verifier"] = verifier
    app.extensions["token_codec"] = codec
    app.extensions["revocation_store"] = revocations
    app.extensions["permission_catalog"] = catalog
    app.extensions["auth_service"] = AuthService(storage, verifier, codec, revocations)
    app.extensions["pagination"] = PaginationEngine(storage, limit=app.config["ARTICLES_PAGE_LIMIT"])

    AuthorizationMiddleware(
        codec,
        revocations,
        storage.find_user_by_id,
        OPERATION_PERMISSIONS,
        public_endpoints=PUBLIC_ENDPOINTS,
        public_blueprints=PUBLIC_BLUEPRINTS,
    ).init_app(app)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .articles import bp as articles_bp
    from .permissions import bp as permissions_bp
    from .commands import register_commands

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(articles_bp, url_prefix="/api/v1")
    app.register_blueprint(permissions_bp, url_prefix="/api/v1")
    register_commands(app)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Content API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
