"""Plain-text encoding of unlock requests, grants and rejections as notifications.

Requests, grants and rejections travel over the generic notification channel.
Their meaning is carried by bracketed tags at the start of the title::

    [UNLOCK_REQUEST][EVAL_ID:<id>][USER_ID:<requester>][EVAL_NAME:<title>] Solicitud de Edición
    [UNLOCK_REJECTED] Solicitud Rechazada para Evaluación #<id>

and by an optional final body line ``URL: #<path>`` used as a deep link.
"""

from __future__ import annotations

import re
import typing as t

from gradebook.model import Course, Evaluation, Notification, NotificationKind, NotificationMessage

from .policy import Actor

RequestTag = "[UNLOCK_REQUEST]"
RejectedTag = "[UNLOCK_REJECTED]"
RequestDisplayTitle = "Solicitud de Edición"
UnknownCourse = "desconocido"
UrlPrefix = "URL:"

_brackets = re.compile(r"\[.*?\]")
_tags = {
    "evaluation_id": re.compile(r"\[EVAL_ID:([^\]]*)\]"),
    "requesting_user_id": re.compile(r"\[USER_ID:([^\]]*)\]"),
    "evaluation_name": re.compile(r"\[EVAL_NAME:([^\]]*)\]"),
}
_rejected_id = re.compile(r"Evaluación #(\S+)")


class ParsedUnlockRequest(t.NamedTuple):
    evaluation_id: str | None
    requesting_user_id: str | None
    evaluation_name: str | None
    display_title: str
    display_body: str
    action_link: str | None

    @property
    def actionable(self) -> bool:
        return self.evaluation_id is not None and self.requesting_user_id is not None


class ParsedRejection(t.NamedTuple):
    evaluation_id: str | None
    display_title: str
    display_body: str


class DisplayedNotification(t.NamedTuple):
    kind: NotificationKind
    display_title: str
    display_body: str
    action_link: str | None
    unlock_request: ParsedUnlockRequest | None = None
    rejection: ParsedRejection | None = None


def edit_link(template: str, evaluation: Evaluation) -> str:
    return template.format(evaluation_id=evaluation.evaluation_id)


def _tag_value(s: str) -> str:
    # a closing bracket inside a tag value would end the tag early
    return s.replace("[", "(").replace("]", ")")


def _with_reason(content: str, reason: str | None) -> str:
    if reason and reason.strip():
        content += f"\n\nMotivo: {reason.strip()}"
    return content


def _with_link(content: str, link: str | None) -> str:
    if link:
        content += f"\n\n{UrlPrefix} #{link}"
    return content


def split_link(content: str) -> tuple[str, str | None]:
    """Strip a trailing ``URL: #<path>`` line, returning the body and the path."""
    lines = content.rstrip().splitlines()
    if lines and lines[-1].startswith(UrlPrefix):
        target = lines[-1][len(UrlPrefix) :].strip()
        body = "\n".join(lines[:-1]).strip()
        if target.startswith("#"):
            target = target[1:]
        return body, (target or None)
    return content.strip(), None


def build_request(
    evaluation: Evaluation,
    requester: Actor,
    course: Course | None,
    comment: str | None = None,
    *,
    link: str | None = None,
) -> NotificationMessage:
    title = (
        f"{RequestTag}[EVAL_ID:{evaluation.evaluation_id}][USER_ID:{requester.user_id}]"
        f"[EVAL_NAME:{_tag_value(evaluation.title)}] {RequestDisplayTitle}"
    )
    course_name = course.name if course is not None else UnknownCourse
    content = (
        f"El profesor {requester.name} ha solicitado permiso para editar la evaluación "
        f"'{evaluation.title}' del curso '{course_name}'."
    )
    content = _with_link(_with_reason(content, comment), link)
    return NotificationMessage(title=title, content=content)


def parse_request(notification: Notification | NotificationMessage) -> ParsedUnlockRequest | None:
    """Extract the tags of an unlock request, or None when it is not one.

    Each tag is looked up independently; a missing tag leaves its field unset
    rather than failing, which makes the request non-actionable.
    """
    title = notification.title
    if not title.startswith(RequestTag):
        return None

    values: dict[str, str | None] = {}
    for name, pattern in _tags.items():
        m = pattern.search(title)
        values[name] = (m.group(1).strip() or None) if m else None

    body, link = split_link(notification.content)
    return ParsedUnlockRequest(
        evaluation_id=values["evaluation_id"],
        requesting_user_id=values["requesting_user_id"],
        evaluation_name=values["evaluation_name"],
        display_title=_brackets.sub("", title).strip(),
        display_body=body,
        action_link=link,
    )


def build_rejection(evaluation: Evaluation, reason: str | None = None) -> NotificationMessage:
    title = f"{RejectedTag} Solicitud Rechazada para Evaluación #{evaluation.evaluation_id}"
    content = f'Su solicitud para editar la evaluación "{evaluation.title}" ha sido rechazada.'
    return NotificationMessage(title=title, content=_with_reason(content, reason))


def parse_rejection(notification: Notification | NotificationMessage) -> ParsedRejection | None:
    title = notification.title
    if not title.startswith(RejectedTag):
        return None
    m = _rejected_id.search(title)
    body, _ = split_link(notification.content)
    return ParsedRejection(
        evaluation_id=m.group(1) if m else None,
        display_title=title[len(RejectedTag) :].strip(),
        display_body=body,
    )


def build_grant(evaluation: Evaluation, *, link: str | None = None) -> NotificationMessage:
    title = f"Evaluación Desbloqueada: {evaluation.title}"
    content = (
        f'La evaluación "{evaluation.title}" ha sido desbloqueada para su edición por un administrador. '
        "Ahora puede modificarla."
    )
    return NotificationMessage(title=title, content=_with_link(content, link))


def parse_notification(notification: Notification | NotificationMessage) -> DisplayedNotification:
    """Classify a notification and compute what an inbox should display."""
    if (request := parse_request(notification)) is not None:
        return DisplayedNotification(
            kind=NotificationKind.UnlockRequest,
            display_title=request.display_title,
            display_body=request.display_body,
            action_link=request.action_link,
            unlock_request=request,
        )

    if (rejection := parse_rejection(notification)) is not None:
        return DisplayedNotification(
            kind=NotificationKind.UnlockRejected,
            display_title=rejection.display_title,
            display_body=rejection.display_body,
            action_link=None,
            rejection=rejection,
        )

    body, link = split_link(notification.content)
    return DisplayedNotification(
        kind=NotificationKind.Plain,
        display_title=notification.title.strip(),
        display_body=body,
        action_link=link,
    )
