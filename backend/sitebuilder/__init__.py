import logging
import os

import click
from flask import Flask, current_app, send_file
from flask_swagger_ui import get_swaggerui_blueprint

from .config import config_by_name
from .extensions import db, migrate, jwt
from .api.v1 import v1_bp
from .public.routes import public_bp
from .middleware.tenant_middleware import tenant_middleware
from .errors import register_error_handlers
from .tenancy.resolver import TenantResolver

SWAGGER_URL = "/swagger"
OPENAPI_URL = "/openapi/builder.yaml"
OPENAPI_FILE = os.path.join("api", "v1", "builder_openapi.yaml")


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # -------------------------------------------------
    # Logging
    # -------------------------------------------------
    level = getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger("sitebuilder").setLevel(level)

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    app.extensions["tenant_resolver"] = TenantResolver.from_config(app.config)

    # -------------------------------------------------
    # Middleware / API
    # -------------------------------------------------
    tenant_middleware(app)
    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)

    register_docs(app)

    # Public pages match any path, so they go last
    app.register_blueprint(public_bp)

    register_cli(app)
    return app


def register_docs(app: Flask) -> None:
    """OpenAPI document plus Swagger UI; both public, no tenant header."""

    @app.route(OPENAPI_URL, methods=["GET"], endpoint="openapi_builder")
    def serve_openapi():
        spec_path = os.path.join(current_app.root_path, OPENAPI_FILE)
        if not os.path.exists(spec_path):
            raise FileNotFoundError("builder_openapi.yaml not found")

        return send_file(spec_path, mimetype="application/yaml", as_attachment=False)

    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        OPENAPI_URL,
        config={
            "app_name": "Site Builder API",
            "deepLinking": True,
            "persistAuthorization": True,
        },
    )
    app.register_blueprint(swaggerui_blueprint, url_prefix=SWAGGER_URL)


def register_cli(app: Flask) -> None:
    @app.cli.command("publish-scheduled")
    def publish_scheduled_command():
        """Publish every page whose schedule has elapsed."""
        from .application.cms.publish_page import publish_due_pages

        revisions = publish_due_pages()
        click.echo(f"Published {len(revisions)} scheduled page(s)")
