"""CLI commands for managing schools and their courses."""

from __future__ import annotations

from sqlalchemy.orm import Session

import gradebook.lib.cli as click
from gradebook.core import di
from gradebook.storage import course as course_storage
from gradebook.storage import school as school_storage


@click.group("school")
def school():
    """Manage schools and courses."""
    ...


@school.command("create")
@click.argument("name")
@click.argument("slug")
@di.inject
def school_create(
    name: str,
    slug: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Create a new school.

    NAME is the display name for the school.
    SLUG is a URL-friendly identifier (e.g., 'colegio-norte').
    """
    with session.begin():
        if school_storage.get(slug=slug, session=session) is not None:
            raise click.ClickException(f"school with slug '{slug}' already exists")
        created = school_storage.create(name=name, slug=slug, session=session)

    click.echo(f"Created school: {created.name}")
    click.echo(f"  ID: {created.school_id}")
    click.echo(f"  Slug: {created.slug}")


@school.command("add-course")
@click.argument("slug")
@click.argument("name")
@di.inject
def school_add_course(
    slug: str,
    name: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Add a course named NAME to the school identified by SLUG."""
    with session.begin():
        found = school_storage.get(slug=slug, session=session)
        if found is None:
            raise click.ClickException(f"school '{slug}' not found")
        course = course_storage.create(school_id=found.school_id, name=name, session=session)

    click.echo(f"Created course: {course.name}")
    click.echo(f"  ID: {course.course_id}")


@school.command("show")
@click.argument("slug")
@di.inject
def school_show(
    slug: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Show a school and its courses."""
    with session.begin():
        found = school_storage.get(slug=slug, session=session)
        if found is None:
            raise click.ClickException(f"school '{slug}' not found")
        courses = course_storage.find(school_id=found.school_id, session=session)

    click.echo(f"School: {found.name}")
    click.echo(f"  ID: {found.school_id}")
    click.echo(f"  Slug: {found.slug}")
    if courses:
        click.echo(f"\nCourses ({len(courses)}):")
        for c in courses:
            click.echo(f"  - {c.name} [{c.course_id}]")
    else:
        click.echo("\nNo courses.")


command = school
