"""Error taxonomy for structured extraction.

Every error raised by the engine derives from :class:`L1MError` and may carry
the best-effort :class:`~l1m.models.ExtractionResult` seen before the failure,
so callers can inspect near-misses.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from l1m.models import Attempt, ExtractionResult


class L1MError(Exception):
    """Base class for all extraction failures."""

    def __init__(self, message: str, result: Optional["ExtractionResult"] = None):
        super().__init__(message)
        self.message = message
        self.result = result


class SchemaError(L1MError):
    """The target schema cannot be used for extraction."""


class SchemaIllegalError(SchemaError):
    """The schema uses a construct the engine does not support."""


class SchemaInvalidSyntaxError(SchemaError):
    """The schema is not valid JSON Schema."""


class ProviderError(L1MError):
    """A provider could not produce a usable text response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider_response: Any = None,
        result: Optional["ExtractionResult"] = None,
    ):
        super().__init__(message, result=result)
        self.status_code = status_code
        self.provider_response = provider_response


class ProviderMisconfiguredError(ProviderError):
    """The provider selection is missing or incomplete."""


class ProviderTransportError(ProviderError):
    """Network failure, timeout or non-2xx status from the provider."""


class ProviderResponseShapeError(ProviderError):
    """The provider answered, but not in the envelope we expect."""


class ResponseParseError(L1MError):
    """No JSON object could be recovered from the model output."""


class NoJSONFoundError(ResponseParseError):
    pass


class MalformedJSONError(ResponseParseError):
    pass


class ValidationExhaustedError(L1MError):
    """All attempts produced output that still fails schema validation."""

    def __init__(
        self,
        message: str,
        result: Optional["ExtractionResult"] = None,
        attempts: Optional[List["Attempt"]] = None,
    ):
        super().__init__(message, result=result)
        self.attempts = list(attempts or [])

    @property
    def errors(self) -> str:
        return self.attempts[-1].errors if self.attempts else ""


class L1MClientError(L1MError):
    """Error returned by a remote l1m proxy."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        return f"l1m error: {self.message} (status: {self.status_code})"
