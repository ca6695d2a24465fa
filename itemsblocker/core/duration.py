"""
Duration tokens for block commands.

    "0" | "now"            -> INSTANT (zero-length span)
    "wipe"                 -> WIPE    (until the next reset signal)
    <number><ms|s|m|h|d>   -> SPAN
    <number>               -> SPAN, in minutes

Tokens are case-insensitive and trimmed. The parser does not judge whether a
span is usable; a zero or negative span is returned as-is and rejected by the
mutator, which knows the scope it is for.
"""

import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from itemsblocker.core.exceptions import DurationError


class DurationKind(Enum):
    INSTANT = "instant"
    SPAN = "span"
    WIPE = "wipe"


@dataclass(frozen=True)
class ParsedDuration:
    kind: DurationKind
    span: timedelta = timedelta(0)

    @property
    def is_wipe(self) -> bool:
        return self.kind is DurationKind.WIPE

    @property
    def is_positive(self) -> bool:
        return self.kind is DurationKind.SPAN and self.span > timedelta(0)


INSTANT = ParsedDuration(DurationKind.INSTANT)
WIPE = ParsedDuration(DurationKind.WIPE)

_UNITS = {
    "ms": "milliseconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}

_TOKEN_RE = re.compile(r"^([+-]?(?:\d+(?:\.\d*)?|\.\d+))(ms|s|m|h|d)?$")

EXAMPLES = "30m, 2h, 1d, 90s, wipe"


def is_wipe_token(token) -> bool:
    return isinstance(token, str) and token.strip().lower() == "wipe"


def parse_duration(token: str) -> ParsedDuration:
    """
    Parse a duration token.

    Raises:
        DurationError: token is empty or not one of the accepted forms.
    """
    if token is None or not token.strip():
        raise DurationError(f"Missing duration. Examples: {EXAMPLES}")

    normalized = token.strip().lower()

    if normalized in ("0", "now"):
        return INSTANT
    if normalized == "wipe":
        return WIPE

    match = _TOKEN_RE.match(normalized)
    if match is None:
        raise DurationError(
            f"Invalid duration: {token}. Examples: {EXAMPLES}",
            {"token": token},
        )

    value = float(match.group(1))
    unit = _UNITS[match.group(2) or "m"]
    try:
        span = timedelta(**{unit: value})
    except OverflowError:
        raise DurationError(f"Duration out of range: {token}", {"token": token})

    return ParsedDuration(DurationKind.SPAN, span)
