#!/usr/bin/env python3
"""
ProAce Predictions Management CLI

This script provides command-line management functionality for the ProAce
Predictions application.
"""

import logging

import click
from flask import current_app
from flask.cli import with_appcontext
from flask_migrate import downgrade, migrate, upgrade
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import create_app, db
from app.models import Match, Prediction, Team, User
from app.services import EntityStore, SettingsService, UserService

app = create_app()


@click.group()
def cli():
    """ProAce Predictions Management CLI"""
    pass


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


# Database Migration Commands
@cli.group()
def db_migrate():
    """Database migration commands"""
    pass


@db_migrate.command()
@click.option("-m", "--message", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Create a new migration"""
    migrate(message=message)
    click.echo(f"✅ Created migration: {message}")


@db_migrate.command()
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations"""
    upgrade(revision=revision)
    click.echo(f"✅ Upgraded database to {revision}")


@db_migrate.command()
@click.option("--revision", required=True, help="Revision to downgrade to")
@with_appcontext
def rollback_migration(revision):
    """Roll back to a migration"""
    downgrade(revision=revision)
    click.echo(f"✅ Downgraded database to {revision}")


# Seed Data
@cli.command()
@with_appcontext
def seed():
    """Create the admin user, canonical teams and default site settings"""
    if not current_app.config.get("ADMIN_PASSWORD"):
        click.echo("❌ ADMIN_PASSWORD is not set. Run 'python3 generate_secrets.py'.")
        return

    store = EntityStore(db.session)
    users = UserService(store)

    try:
        admin, created = users.ensure_admin(
            current_app.config["ADMIN_USERNAME"],
            current_app.config["ADMIN_PASSWORD"],
            email=current_app.config.get("ADMIN_EMAIL"),
        )
        teams = users.seed_teams()
        settings = SettingsService(store).seed_defaults()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error seeding data: {str(e)}")
        logging.error(f"Seeding failed - SQL error: {e}")
        return

    if created:
        click.echo(f"✅ Created admin user '{admin.username}'")
    else:
        click.echo(f"ℹ️  Admin user '{admin.username}' already exists")
    click.echo(f"✅ Created {len(teams)} teams")
    click.echo(f"✅ Stored {len(settings)} default settings")


# User Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command()
@click.argument("username")
@click.argument("password")
@click.option("--email", help="Email address")
@with_appcontext
def create_admin(username, password, email=None):
    """Create an admin user"""
    try:
        admin, created = UserService(EntityStore(db.session)).ensure_admin(
            username, password, email=email
        )
        if not created:
            click.echo(f"❌ User with username '{username}' already exists!")
            return
        db.session.commit()
        click.echo(f"✅ Created admin user '{admin.username}'")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Error creating user: {str(e)}")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = EntityStore(db.session).list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        role = "👑" if u.is_admin else "👤"
        click.echo(f"  {role} {u.username} ({u.full_name}) - {u.points} pts")


# Match Commands
@cli.group()
def match():
    """Match commands"""
    pass


@match.command("list")
@click.option(
    "--status",
    type=click.Choice(Match.STATUSES),
    help="Only matches with this status",
)
@with_appcontext
def list_matches(status):
    """List matches"""
    matches = EntityStore(db.session).list_matches(status=status)

    if not matches:
        click.echo("No matches found.")
        return

    for m in matches:
        scored = " ✅ scored" if m.is_scored else ""
        click.echo(
            f"  #{m.id} [{m.status}] {m.team1.name} vs {m.team2.name} "
            f"- {m.match_date:%Y-%m-%d %H:%M}{scored}"
        )


# Points Commands
@cli.group()
def points():
    """Points bookkeeping commands"""
    pass


def _points_mismatches(store):
    """Users whose running total differs from their ledger total"""
    totals = store.ledger_totals_by_user()
    return [
        (u, u.points or 0, totals.get(u.id, 0))
        for u in store.list_users()
        if (u.points or 0) != totals.get(u.id, 0)
    ]


@points.command()
@with_appcontext
def audit():
    """Compare user point totals with the points ledger"""
    mismatches = _points_mismatches(EntityStore(db.session))

    if not mismatches:
        click.echo("✅ All user totals match the ledger")
        return

    click.echo(f"⚠️  {len(mismatches)} users differ from the ledger:")
    for u, total, ledger_total in mismatches:
        click.echo(f"  {u.username}: total {total}, ledger {ledger_total}")


@points.command()
@with_appcontext
def rebuild():
    """Reset user point totals to their ledger sums"""
    store = EntityStore(db.session)
    mismatches = _points_mismatches(store)

    try:
        for u, total, ledger_total in mismatches:
            store.set_user_points(u.id, ledger_total)
            logging.info(
                f"Rebuilt points for {u.username}: {total} -> {ledger_total}"
            )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error rebuilding points: {str(e)}")
        return

    click.echo(f"✅ Rebuilt points for {len(mismatches)} users")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏏 ProAce Predictions Status")
    click.echo("=" * 40)

    # Database connection
    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    click.echo(f"👥 Users: {User.query.count()}")
    click.echo(f"🏳️  Teams: {Team.query.count()}")

    match_count = Match.query.count()
    completed = Match.query.filter_by(status="completed").count()
    click.echo(f"🏏 Matches: {completed}/{match_count} completed")
    click.echo(f"🎯 Predictions: {Prediction.query.count()}")


if __name__ == "__main__":
    with app.app_context():
        cli()
