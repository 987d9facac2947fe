"""
Error taxonomy of the assessment engine.

Only ``TransportFailure`` and ``MalformedInput`` travel between the
transports and the probe layer; the probe layer turns them into Activity
outcomes, so criteria never see them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sparql_assessment.models import Request, Response


class AssessmentError(Exception):
    """Base class of every error raised by the engine."""


class TransportFailure(AssessmentError):
    """A single transport attempt failed (network, timeout, non-2xx)."""

    def __init__(
        self,
        message: str,
        request: "Request | None" = None,
        response: "Response | None" = None,
    ) -> None:
        super().__init__(message)
        self.request = request
        self.response = response


class MalformedInput(AssessmentError):
    """Input that cannot be probed at all, such as an unparsable URI."""


class FrozenActivityError(AssessmentError, AttributeError):
    """Raised when a finalized Activity is modified."""
