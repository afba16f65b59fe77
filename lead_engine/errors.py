"""
Error taxonomy for the Lead Intelligence Engine.

Scoring and aggregation never raise these; they come from the engine's
store access and parameter checks, and the API layer maps each one to a
status code.
"""

from typing import Any, Dict, Optional


class LeadEngineError(Exception):
    """Base class for engine errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "success": False,
            "error": self.message,
            "type": type(self).__name__,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(LeadEngineError):
    """Missing or malformed parameters; nothing was processed."""

    status_code = 400


class AuthorizationError(LeadEngineError):
    """The caller's role check failed; the operation was aborted."""

    status_code = 403


class UpstreamStoreError(LeadEngineError):
    """A read or write against the lead store failed. Not retried."""

    status_code = 502
