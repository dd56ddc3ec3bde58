"""
exceptions.py

Responsibility: Defines all custom exception classes used by the address
detection engine.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config import NetworkStack


class AddressDetectionError(Exception):
    """
    Base class for every failure raised by the detection engine.

    Callers that only need "skip this cycle" semantics catch this class;
    nothing in the engine treats a detection failure as fatal.
    """


class DetectorConfigError(AddressDetectionError):
    """
    Raised when a detection spec cannot be turned into a detector, e.g.
    type=ThirdParty with no api section, or an unknown enum value.
    """


class TransportError(AddressDetectionError):
    """
    Raised by ThirdPartyAddressDetector when the endpoint cannot be reached
    (DNS, connect, timeout) or answers with a non-2xx status.
    """


class ContextCancelledError(AddressDetectionError):
    """Raised when the detector's parent stop signal aborts a request."""


class MissingJsonPathError(AddressDetectionError):
    """
    Raised when a response must be parsed as JSON (application/json content
    type) but no json path is configured to pull the address out of it.
    """


class InterfaceNotFoundError(AddressDetectionError):
    """Raised by InterfaceAddressDetector when the named interface does not exist."""


# ---------------------------------------------------------------------------
# Extraction errors
# ---------------------------------------------------------------------------


class ExtractionError(AddressDetectionError):
    """Base class for failures while extracting a value from a JSON payload."""


class EmptyPayloadError(ExtractionError):
    """Raised when the response body to extract from is empty."""


class EmptyQueryError(ExtractionError):
    """Raised when the query expression is empty."""


class MalformedPayloadError(ExtractionError):
    """Raised when the payload is not valid JSON."""


class InvalidQueryError(ExtractionError):
    """Raised when the query expression fails to compile."""


class QueryTimeoutError(ExtractionError):
    """Raised when query evaluation exceeds its time budget or is cancelled."""


class QueryEvaluationError(ExtractionError):
    """Raised when the query produces an error value while running."""


class NonScalarResultError(ExtractionError):
    """
    Raised when the first query result is present but is not a string.

    Numbers, booleans, objects and arrays are never coerced into an address.
    """


# ---------------------------------------------------------------------------
# Policy errors
# ---------------------------------------------------------------------------


class AddressPolicyError(AddressDetectionError):
    """Base class for candidates rejected by format or scope rules."""


class InvalidAddressFormatError(AddressPolicyError):
    """
    Raised when a candidate is not a literal of the configured stack's family.

    Attributes:
        address: The offending candidate string.
    """

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"invalid address: {address}")


class LocalAddressRejectedError(AddressPolicyError):
    """
    Raised when a private/local-use candidate is found and the local address
    policy is Ignore.

    Attributes:
        address: The rejected literal.
        stack: The NetworkStack the detection ran for.
    """

    def __init__(self, address: str, stack: NetworkStack) -> None:
        self.address = address
        self.stack = stack
        kind = "ULA address" if stack == "IPv6" else "local address"
        super().__init__(f"{kind} is ignored: {address}")


class NoAddressFoundError(AddressPolicyError):
    """Raised when no candidate of the configured stack's family is available."""
