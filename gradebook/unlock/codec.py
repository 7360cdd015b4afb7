"""Override marker and grade-weight suffix encoding inside an evaluation description.

A stored description has the layout::

    <body text>[@<percent>][ @@OVERRIDE:<admin id>:<epoch millis>]

The percent suffix is the grade weight of the evaluation. The override token,
when present, lets the owner edit past the grace window. Nothing outside this
module reads or writes either suffix.
"""

from __future__ import annotations

import datetime
import decimal
import re
import typing as t

OverrideTag = "@@OVERRIDE:"
Epoch = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)

# any override fragment, well-formed or not, together with one separating whitespace
_fragment = re.compile(r"\s?" + re.escape(OverrideTag) + r"\S*")
_token = re.compile(re.escape(OverrideTag) + r"(?P<admin_id>[^\s:]+):(?P<granted_at_ms>\d+)")


class OverrideToken(t.NamedTuple):
    admin_id: str
    granted_at_ms: int

    @classmethod
    def mint(cls, admin_id: str, now: datetime.datetime) -> OverrideToken:
        if not admin_id or any(c.isspace() or c == ":" for c in admin_id):
            raise ValueError(f"admin id cannot be encoded in an override token: {admin_id!r}")
        return cls(admin_id=admin_id, granted_at_ms=epoch_millis(now))

    @classmethod
    def parse(cls, s: str) -> OverrideToken | None:
        m = _token.fullmatch(s)
        if m is None:
            return None
        return cls(admin_id=m["admin_id"], granted_at_ms=int(m["granted_at_ms"]))

    @property
    def granted_at(self) -> datetime.datetime:
        return Epoch + datetime.timedelta(milliseconds=self.granted_at_ms)

    def __str__(self) -> str:
        return f"{OverrideTag}{self.admin_id}:{self.granted_at_ms}"


class Decomposed(t.NamedTuple):
    body: str
    percent: decimal.Decimal | None
    override: OverrideToken | None


def epoch_millis(now: datetime.datetime) -> int:
    if now.tzinfo is None:
        now = now.replace(tzinfo=datetime.UTC)
    return (now - Epoch) // datetime.timedelta(milliseconds=1)


def parse_percent(s: str) -> decimal.Decimal | None:
    try:
        value = decimal.Decimal(s.strip())
    except decimal.InvalidOperation:
        return None
    return value if value.is_finite() else None


def decompose(description: str | None) -> Decomposed:
    """Split a description into body text, percent suffix and override token.

    Override fragments are removed first, wherever they occur, so that a
    malformed or duplicated token never leaks back into the body. The last
    well-formed fragment wins. The percent is then the final `@`-delimited
    segment of what remains, if it parses as a number.
    """
    if not description:
        return Decomposed("", None, None)

    override: OverrideToken | None = None
    for m in _fragment.finditer(description):
        token = OverrideToken.parse(m.group().lstrip())
        if token is not None:
            override = token

    text = _fragment.sub("", description)

    head, sep, tail = text.rpartition("@")
    if sep:
        percent = parse_percent(tail)
        if percent is not None:
            return Decomposed(head, percent, override)
    return Decomposed(text, None, override)


def compose(
    body: str,
    percent: decimal.Decimal | None = None,
    override: OverrideToken | None = None,
) -> str:
    text = body
    if percent is not None:
        text = f"{text}@{percent}"
    if override is not None:
        text = f"{text} {override}" if text else str(override)
    return text


def find_override(description: str | None) -> OverrideToken | None:
    return decompose(description).override


def has_override(description: str | None) -> bool:
    return find_override(description) is not None


def grant(description: str | None, admin_id: str, now: datetime.datetime) -> str:
    """Re-stamp `description` with a fresh override token, replacing any prior one."""
    parts = decompose(description)
    return compose(parts.body, parts.percent, OverrideToken.mint(admin_id, now))


def revoke(description: str | None) -> str:
    parts = decompose(description)
    return compose(parts.body, parts.percent)


def rewrite(
    description: str | None,
    body: str,
    percent: decimal.Decimal | None,
    *,
    keep_override: bool,
) -> str:
    """Replace the human-authored part of `description`, keeping or dropping its token."""
    override = decompose(description).override if keep_override else None
    return compose(body, percent, override)
