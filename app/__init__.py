import logging
import os

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from app.config import config_by_env
from app.errors import register_error_handlers
from app.extensions import cache, db, limiter, migrate
from app.routes.api.admin import api_admin_bp
from app.routes.api.v1 import api_v1_bp


def create_app(config_name=None):
    load_dotenv()
    env = config_name or os.getenv("FLASK_ENV", "development")

    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_by_env.get(env, config_by_env["development"]))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if db_uri.startswith("sqlite:///") and not db_uri.startswith("sqlite:////") and db_uri != "sqlite:///:memory:":
        relative_path = db_uri.replace("sqlite:///", "", 1)
        absolute_path = os.path.join(project_root, relative_path)
        os.makedirs(os.path.dirname(absolute_path), exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{absolute_path}"

    _init_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)
    limiter.init_app(app)
    _init_sentry(app, env)

    register_error_handlers(app)

    app.register_blueprint(api_v1_bp, url_prefix="/api/v1")
    app.register_blueprint(api_admin_bp, url_prefix="/api/admin")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    if env in ("development", "testing"):
        with app.app_context():
            db.create_all()

    return app


def _init_logging(app):
    level = os.getenv("LOG_LEVEL", "DEBUG" if app.debug else "INFO").upper()
    app.logger.setLevel(getattr(logging, level, logging.INFO))


def _init_sentry(app, env):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.05")),
            environment=env,
        )
        app.logger.info("Sentry initialized.")
    except Exception as exc:
        app.logger.warning("Sentry initialization failed: %s", exc)
