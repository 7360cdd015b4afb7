"""CLI commands for inspecting evaluation locks and acting on unlock requests."""

from __future__ import annotations

import decimal
import typing as t

from sqlalchemy.orm import Session

import gradebook.lib.cli as click
from gradebook.core import di, TimestampProvider
from gradebook.model import EvaluationID, UnlockRequestStatus
from gradebook.storage import unlock_request as unlock_request_storage
from gradebook.storage import user as user_storage
from gradebook.unlock.errors import EvaluationLockedError, InvalidDescriptionError
from gradebook.unlock.policy import Actor, LockPolicy
from gradebook.unlock.workflow import UnlockWorkflow

UnlockWorkflowFactory = t.Callable[..., UnlockWorkflow]


def _actor(email: str, workflow: UnlockWorkflow, evaluation_id: EvaluationID, session: Session) -> Actor:
    evaluation = workflow.load(evaluation_id)
    with session.begin():
        found = user_storage.get(email=email, session=session)
        if found is None:
            raise click.ClickException(f"user '{email}' not found")
        role = user_storage.get_role(found.user_id, evaluation.school_id, session=session)
    if role is None:
        raise click.ClickException(f"user '{email}' is not a member of the evaluation's school")
    return Actor(user_id=found.user_id, school_id=evaluation.school_id, role=role, name=found.name)


@click.group("evaluation")
def evaluation():
    """Inspect evaluation locks and resolve unlock requests."""
    ...


@evaluation.command("status")
@click.argument("evaluation_id", type=click.KeyParamType(EvaluationID))
@di.inject
def evaluation_status(
    evaluation_id: EvaluationID,
    unlock: UnlockWorkflowFactory = di.Provider["workflow.unlock"],
    session: Session = di.Provide["storage.persistent.session"],
    policy: LockPolicy = di.Provide["workflow.policy"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> None:
    """Show the lock state of an evaluation as its owner sees it."""
    with session:
        found = unlock(session=session).load(evaluation_id)
    state = policy.evaluate(found, None, utcnow())

    click.echo(f"Evaluation: {found.title}")
    click.echo(f"  ID: {found.evaluation_id}")
    click.echo(f"  Date: {found.date.isoformat()}")
    click.echo(f"  Created: {found.create_time}")
    click.echo(f"  Business days elapsed: {state.business_days} (grace {policy.grace_business_days})")
    click.echo(f"  State: {state.state.value}")
    if found.override_grant is not None:
        grant = found.override_grant
        click.echo(f"  Override: granted by {grant.admin_id} at {grant.granted_at.isoformat()}")


@evaluation.command("grant")
@click.argument("evaluation_id", type=click.KeyParamType(EvaluationID))
@click.option("--as", "-a", "email", required=True, help="Email of the administrator granting the override")
@di.inject
def evaluation_grant(
    evaluation_id: EvaluationID,
    email: str,
    unlock: UnlockWorkflowFactory = di.Provider["workflow.unlock"],
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Stamp an override on a locked evaluation and notify its owner."""
    with session:
        workflow = unlock(session=session)
        admin = _actor(email, workflow, evaluation_id, session)
        workflow.require_admin(admin, "grant_override")
        updated = workflow.grant_override(workflow.load(evaluation_id), admin)
    click.echo(f"Override granted on {updated.evaluation_id}")


@evaluation.command("revoke")
@click.argument("evaluation_id", type=click.KeyParamType(EvaluationID))
@click.option("--as", "-a", "email", required=True, help="Email of the administrator revoking the override")
@di.inject
def evaluation_revoke(
    evaluation_id: EvaluationID,
    email: str,
    unlock: UnlockWorkflowFactory = di.Provider["workflow.unlock"],
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Remove the override from an evaluation."""
    with session:
        workflow = unlock(session=session)
        admin = _actor(email, workflow, evaluation_id, session)
        workflow.require_admin(admin, "revoke_override")
        updated = workflow.revoke_override(workflow.load(evaluation_id), admin)
    click.echo(f"Override revoked on {updated.evaluation_id}")


@evaluation.command("edit")
@click.argument("evaluation_id", type=click.KeyParamType(EvaluationID))
@click.argument("body")
@click.option("--percent", "-p", type=click.DecimalParamType(), default=None, help="Grade weight of the evaluation")
@click.option("--as", "-a", "email", required=True, help="Email of the user making the edit")
@di.inject
def evaluation_edit(
    evaluation_id: EvaluationID,
    body: str,
    percent: decimal.Decimal | None,
    email: str,
    unlock: UnlockWorkflowFactory = di.Provider["workflow.unlock"],
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Replace the description of an evaluation, subject to its edit lock."""
    with session:
        workflow = unlock(session=session)
        actor = _actor(email, workflow, evaluation_id, session)
        try:
            updated = workflow.save_content(workflow.load(evaluation_id), actor, body, percent)
        except (EvaluationLockedError, InvalidDescriptionError) as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo(f"Saved {updated.evaluation_id}")
    if updated.override_grant is not None:
        click.echo("  Override kept")


@evaluation.command("requests")
@click.option("--evaluation", "-e", "evaluation_id", type=click.KeyParamType(EvaluationID), default=None)
@click.option("--status", "-s", type=click.EnumType(UnlockRequestStatus), default=UnlockRequestStatus.Pending)
@di.inject
def evaluation_requests(
    evaluation_id: EvaluationID | None,
    status: UnlockRequestStatus,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """List unlock requests, pending ones by default."""
    with session.begin():
        found = unlock_request_storage.find(evaluation_id=evaluation_id, status=status, session=session)

    if not found:
        click.echo("No unlock requests found.")
        return

    click.echo(f"{'ID':<30} {'Evaluation':<30} {'Requester':<30} {'Created':<26}")
    click.echo("-" * 118)
    for r in found:
        click.echo(f"{str(r.unlock_request_id):<30} {str(r.evaluation_id):<30} {str(r.requester_id):<30} {r.create_time}")


command = evaluation
