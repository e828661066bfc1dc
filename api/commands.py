"""
Maintenance commands, run with `flask --app api <command>`.
"""
import click
from flask import current_app

from models import storage
from utils.exceptions import DuplicateEmail
from utils.permissions import PermissionCode, catalog


def register_commands(app):
    @app.cli.command("seed")
    def seed():
        """Create the permission rows and the root admin if missing."""
        created = storage.seed_permissions(catalog)
        click.echo(f"permissions created: {created}")

        email = current_app.config["ROOT_ADMIN_EMAIL"]
        try:
            current_app.extensions["auth_service"].create_user(
                current_app.config["ROOT_ADMIN_NAME"],
                email,
                current_app.config["ROOT_ADMIN_PASSWORD"],
                PermissionCode.ADMIN,
            )
        except DuplicateEmail:
            click.echo(f"root admin {email} already exists")
        else:
            click.echo(f"root admin {email} created")

    @app.cli.command("prune-revoked-tokens")
    def prune_revoked_tokens():
        """Delete blacklist records whose token has expired anyway."""
        count = current_app.extensions["revocation_store"].prune_expired()
        click.echo(f"pruned {count} revoked token(s)")
