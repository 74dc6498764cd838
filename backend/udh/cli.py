# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/udh/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--username tech] [--password ...]
#   Idempotent bootstrap: creates tables and the Technical Team account.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system cleanup-sessions --older-than-days 30
#   Delete expired or revoked session tokens.
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --username owner --password "secret1" --role Owner
#   Create a user (prompts if options are omitted).
#
# Permission inspection:
# - python -m flask perms list
#   List capabilities.
# - python -m flask perms check owner reports
#   Check whether a user holds a capability.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .permissions import CAPABILITY_DEFINITIONS, ROLES, TECHNICAL_TEAM, can, validate_capability_code
from .services.auth_service import create_user, PasswordValidationError
from .services import session_service
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--username', default='tech', help='Technical Team username')
@click.option('--password', default='ChangeMe123', help='Technical Team password')
@with_appcontext
def init_system(username, password):
    """
    Initialize UDH: create tables and the Technical Team account.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing UDH...")
    db.create_all()
    click.echo("PASS Tables ready")

    existing = db.session.query(User).filter_by(role=TECHNICAL_TEAM).first()
    if existing:
        click.echo(f"PASS Using existing Technical Team account: {existing.username}")
        return

    try:
        user = create_user(username, password, role=TECHNICAL_TEAM)
    except (PasswordValidationError, ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created Technical Team account: {user.username}")
    click.echo("WARN Change the default password with POST /api/auth/change-tech-pass")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete. Run 'flask system init' to bootstrap.")


@system_group.command('cleanup-sessions')
@click.option('--older-than-days', default=30, type=int, help='Only delete sessions created before this many days ago')
@with_appcontext
def cleanup_sessions(older_than_days):
    """Delete expired or revoked session tokens."""
    deleted = session_service.cleanup_expired_sessions(older_than_days)
    click.echo(f"PASS Deleted {deleted} session(s)")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = db.session.query(User).order_by(User.username).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 70)
    click.echo(f"{'ID':<5} {'Username':<20} {'Role':<16} {'Active':<8}")
    click.echo("=" * 70)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.username:<20} {user.role:<16} {active_str:<8}")

    click.echo("=" * 70 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), default='Staff', show_default=True, help='Role')
@with_appcontext
def create_user_command(username, password, role):
    """Create a user with the role's default capabilities."""
    try:
        user = create_user(username, password, role=role)
    except (PasswordValidationError, ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user {user.username} ({user.role}, ID: {user.id})")


@click.group('perms')
def perms_group():
    """Capability inspection commands."""


@perms_group.command('list')
def list_perms():
    """List all capabilities."""
    for code, name, description in CAPABILITY_DEFINITIONS:
        click.echo(f"{code:<10} {name:<22} {description}")


@perms_group.command('check')
@click.argument('username')
@click.argument('capability')
@with_appcontext
def check_perm(username, capability):
    """Check whether USERNAME holds CAPABILITY."""
    if not validate_capability_code(capability):
        raise click.ClickException(f"Unknown capability: {capability}")

    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise click.ClickException(f"User not found: {username}")

    if can(user, capability):
        click.echo(f"PASS {username} ({user.role}) has {capability}")
    else:
        click.echo(f"FAIL {username} ({user.role}) does not have {capability}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
