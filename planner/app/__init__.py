"""Application factory and app-wide configuration."""

from typing import Optional

from flask import Flask, request
from flask_cors import CORS

from planner.app.api.routes import api_bp
from planner.config import Settings, configure_logging, settings as default_settings
from planner.domain.tax_tables import FallbackTaxTableSource


def create_app(
    settings: Optional[Settings] = None,
    tax_tables: Optional[FallbackTaxTableSource] = None,
) -> Flask:
    """Build the Flask app instance."""
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config["PLANNER_SETTINGS"] = settings
    app.config["TAX_TABLES"] = tax_tables or FallbackTaxTableSource()

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    allowed_origins = set(settings.cors_origins)

    @app.after_request
    def add_cors_headers(response):
        """Echo an allowed Origin back on API responses."""
        origin = request.headers.get("Origin", "")
        if request.path.startswith("/api/") and origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    app.register_blueprint(api_bp, url_prefix="/api")
    return app
