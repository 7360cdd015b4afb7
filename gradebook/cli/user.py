"""CLI commands for managing users, school memberships and access tokens."""

from __future__ import annotations

import datetime
import secrets

import pydantic as p
from sqlalchemy.orm import Session

import gradebook.lib.cli as click
from gradebook.auth import JWTManager
from gradebook.core import di
from gradebook.model import UserRole
from gradebook.storage import school as school_storage
from gradebook.storage import user as user_storage


@click.group("user")
def user():
    """Manage users and their school memberships."""
    ...


@user.command("create")
@click.argument("email")
@click.argument("name")
@click.option("--school", "-S", "school_slug", help="School slug to add the user to")
@click.option("--role", "-r", type=click.EnumType(UserRole), help="User role in the school")
@click.option("--password", "-p", help="Password (if not provided, a random one is generated)")
@di.inject
def user_create(
    email: str,
    name: str,
    school_slug: str | None,
    role: UserRole | None,
    password: str | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Create a new user, optionally adding them to a school.

    EMAIL is the user's email address.
    NAME is the user's display name.
    """
    if (school_slug is None) != (role is None):
        raise click.UsageError("--school and --role must be given together")

    generated_password = None
    if not password:
        generated_password = secrets.token_urlsafe(12)
        password = generated_password

    with session.begin():
        found_school = None
        if school_slug is not None:
            found_school = school_storage.get(slug=school_slug, session=session)
            if found_school is None:
                raise click.ClickException(f"school '{school_slug}' not found")

        if user_storage.get(email=email, session=session) is not None:
            raise click.ClickException(f"user with email '{email}' already exists")

        new_user = user_storage.create(email=email, name=name, password=p.Secret(password), session=session)
        if found_school is not None and role is not None:
            user_storage.add_membership(new_user.user_id, found_school.school_id, role, session=session)

    click.echo(f"Created user: {new_user.name}")
    click.echo(f"  ID: {new_user.user_id}")
    click.echo(f"  Email: {new_user.email}")
    if found_school is not None and role is not None:
        click.echo(f"  School: {found_school.name} ({role.value})")
    if generated_password:
        click.echo(f"  Generated password: {generated_password}")


@user.command("add-membership")
@click.argument("email")
@click.argument("school_slug")
@click.option("--role", "-r", type=click.EnumType(UserRole), required=True, help="User role in the school")
@di.inject
def user_add_membership(
    email: str,
    school_slug: str,
    role: UserRole,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Give an existing user a role in a school."""
    with session.begin():
        found_user = user_storage.get(email=email, with_memberships=True, session=session)
        if found_user is None:
            raise click.ClickException(f"user '{email}' not found")

        found_school = school_storage.get(slug=school_slug, session=session)
        if found_school is None:
            raise click.ClickException(f"school '{school_slug}' not found")

        if any(m.school_id == found_school.school_id for m in found_user.memberships):
            raise click.ClickException(f"user is already a member of '{school_slug}'")

        user_storage.add_membership(found_user.user_id, found_school.school_id, role, session=session)

    click.echo(f"Added {found_user.name} to {found_school.name} as {role.value}")


@user.command("token")
@click.argument("email")
@click.argument("school_slug")
@click.option("--expires", "-e", type=click.IntRange(min=1), default=None, help="Lifetime in minutes")
@di.inject
def user_token(
    email: str,
    school_slug: str,
    expires: int | None,
    session: Session = di.Provide["storage.persistent.session"],
    jwt_manager: JWTManager = di.Provide["auth.jwt_manager"],
) -> None:
    """Issue a bearer token for EMAIL acting within SCHOOL_SLUG."""
    with session.begin():
        found_user = user_storage.get(email=email, session=session)
        if found_user is None:
            raise click.ClickException(f"user '{email}' not found")
        found_school = school_storage.get(slug=school_slug, session=session)
        if found_school is None:
            raise click.ClickException(f"school '{school_slug}' not found")
        role = user_storage.get_role(found_user.user_id, found_school.school_id, session=session)
        if role is None:
            raise click.ClickException(f"user is not a member of '{school_slug}'")

    token = jwt_manager.create_access_token(
        found_user.user_id,
        found_school.school_id,
        role,
        expires_delta=datetime.timedelta(minutes=expires) if expires else None,
    )
    click.echo(token)


command = user
