import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate

from config import Config
from models import db
from routes import (
    admin_bp,
    booking_bp,
    events_bp,
    gcp_bp,
    health_bp,
    menus_bp,
    places_bp,
    social_bp,
)
from services import ServiceError, init_services
from utils.auth_context import load_current_identity

logger = logging.getLogger(__name__)


def create_app(config_class=Config, identity=None, iam=None, images=None):
    """
    Collaborator clients are built once here and live on app.extensions;
    tests pass fakes for identity / iam / images.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(menus_bp)
    app.register_blueprint(gcp_bp)
    app.register_blueprint(social_bp)
    app.register_blueprint(places_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    init_services(app, identity=identity, iam=iam, images=images)

    if app.config.get("TESTING"):
        with app.app_context():
            db.create_all()

    @app.before_request
    def _load_identity():
        load_current_identity()

    @app.errorhandler(ServiceError)
    def _service_error(exc):
        # upstream failures are surfaced to the (trusted) caller as-is
        logger.error("upstream call failed: %s", exc)
        db.session.rollback()
        return jsonify(error=str(exc) or exc.__class__.__name__), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return resp

    register_cli(app)

    return app

#-------------------------
from security.bruteforce import reenable
from services import get_iam
from utils.allowlist import add_admin_email, is_valid_email, normalize_email

def register_cli(app):
    @app.cli.command("add-admin-email")
    @click.argument("email")
    def add_admin_email_cmd(email):
        """Put an email on the admin allowlist (bootstrap)."""
        email = normalize_email(email)
        if not is_valid_email(email):
            click.echo("Invalid email")
            return
        if add_admin_email(email):
            click.echo(f"{email} added to admin allowlist")
        else:
            click.echo(f"{email} already on admin allowlist")

    @app.cli.command("reenable-user")
    @click.argument("email")
    def reenable_user_cmd(email):
        """Enable a locked-out account and clear its failure count."""
        try:
            reenable(email)
        except ServiceError as exc:
            click.echo(f"Could not re-enable {email}: {exc}")
            return
        click.echo(f"{normalize_email(email)} re-enabled")

    @app.cli.command("list-project-members")
    def list_project_members_cmd():
        """Print live cloud project IAM members."""
        try:
            members = get_iam().get_members(force_refresh=True)
        except ServiceError as exc:
            click.echo(f"IAM lookup failed: {exc}")
            return
        for m in members:
            click.echo(m)

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
