"""Parse diagnostics.

Diagnostics describe input the parser recovered from.  They are recorded
and logged for telemetry only; they never change what ``append`` or
``finalize`` return and are never raised.
"""

from __future__ import annotations

import logging
from typing import TypedDict

logger = logging.getLogger(__name__)

MALFORMED_FENCE = "MALFORMED_FENCE"
INVALID_TYPE = "INVALID_TYPE"
MISSING_CONTENT = "MISSING_CONTENT"
UNCLOSED_FENCE = "UNCLOSED_FENCE"

DIAGNOSTIC_CODES: frozenset[str] = frozenset(
    {MALFORMED_FENCE, INVALID_TYPE, MISSING_CONTENT, UNCLOSED_FENCE}
)

# Longest slice of source text kept on a diagnostic.
_RAW_LIMIT = 200


class ParseDiagnostic(TypedDict):
    code: str
    message: str
    position: dict[str, int]
    raw: str


def create_diagnostic(code: str, message: str, start: int, end: int, raw: str) -> ParseDiagnostic:
    """Build a diagnostic dict.  Raises ValueError for an unknown *code*."""
    if code not in DIAGNOSTIC_CODES:
        raise ValueError(f"Unknown diagnostic code: '{code}'")
    return {
        "code": code,
        "message": message,
        "position": {"start": start, "end": max(start, end)},
        "raw": raw[:_RAW_LIMIT],
    }


def log_diagnostic(diagnostic: ParseDiagnostic) -> None:
    pos = diagnostic["position"]
    logger.debug(
        "%s at %d-%d: %s",
        diagnostic["code"],
        pos["start"],
        pos["end"],
        diagnostic["message"],
    )
