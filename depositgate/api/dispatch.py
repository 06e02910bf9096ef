"""Outcome dispatch — maps a validation outcome to a boundary response.

Stateless: the same outcome always maps to the same response, and the
validator itself knows nothing about status codes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from depositgate.models.outcome import ValidationOutcome

HTTP_OK = 200
HTTP_BAD_REQUEST = 400

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1


class DepositResponse(BaseModel):
    """Transport-neutral response: a status code and a JSON-ready body."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: dict[str, Any]


def outcome_body(outcome: ValidationOutcome) -> dict[str, Any]:
    """The response body: success flag plus violation messages in order."""
    return {
        "success": outcome.succeeded,
        "messages": list(outcome.messages),
    }


def dispatch_outcome(outcome: ValidationOutcome) -> DepositResponse:
    """200 for an accepted deposit, 400 for a rejected one."""
    return DepositResponse(
        status_code=HTTP_OK if outcome.succeeded else HTTP_BAD_REQUEST,
        body=outcome_body(outcome),
    )


def exit_code_for(outcome: ValidationOutcome) -> int:
    """Process exit code for command-line callers."""
    return EXIT_ACCEPTED if outcome.succeeded else EXIT_REJECTED
