"""
detectors/thirdparty_detector.py

Responsibility: Detects the host's address by querying a configured
third-party HTTP endpoint, extracting the address from plain-text or JSON
responses and validating it against the configured stack and policy.
Does NOT: cache addresses, retry failed requests, or update DNS records.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

import httpx

from config import LocalAddressPolicy, NetworkStack
from exceptions import ContextCancelledError, MissingJsonPathError, TransportError
from services.address_policy import evaluate_candidate
from services.cancellation import StopRequested, run_until_stopped
from services.extraction_service import JqExtractor, JsonExtractor

logger = logging.getLogger(__name__)

# Deadline for one request, layered on the detector's parent stop signal
REQUEST_TIMEOUT_SECONDS = 3.0


class ThirdPartyAddressDetector:
    """
    Implements AddressDetector using a third-party "what is my IP" endpoint.

    Uses an injected httpx.AsyncClient so the detector is fully testable
    without real network calls (use respx.mock in tests). All fields are
    plain resolved values; construct through create_detector() to get
    defaults applied from an AddressDetectionSpec.

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
        - JsonExtractor: pulls the address out of JSON responses
        - asyncio.Event: optional parent stop signal
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        stack: NetworkStack,
        json_path: str = "",
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        username: str = "",
        password: str = "",
        local_address_policy: LocalAddressPolicy = LocalAddressPolicy.IGNORE,
        stop_event: Optional[asyncio.Event] = None,
        extractor: Optional[JsonExtractor] = None,
        detector_logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            url: Endpoint returning the caller's address.
            stack: Address family to validate the response against.
            json_path: jq expression for JSON responses; "" when unset.
            params: Query-string parameters merged into the URL.
            headers: Extra request headers.
            username: HTTP basic auth user; "" when unset.
            password: HTTP basic auth password; "" when unset.
            local_address_policy: How private addresses are treated.
            stop_event: Parent stop signal; setting it aborts in-flight work.
            extractor: JSON extraction strategy; defaults to JqExtractor.
            detector_logger: Logger to report through; defaults to this module's.
        """
        self._client = http_client
        self._url = url
        self._stack = stack
        self._json_path = json_path
        self._params = dict(params or {})
        self._headers = dict(headers or {})
        self._username = username
        self._password = password
        self._policy = local_address_policy
        self._stop_event = stop_event
        self._extractor = extractor or JqExtractor(stop_event=stop_event)
        self._logger = detector_logger or logger

    # ---------------------------------------------------------------------------
    # AddressDetector implementation
    # ---------------------------------------------------------------------------

    async def detect(self) -> str:
        """
        Requests the address and validates it for the configured stack.

        Returns:
            The validated address literal.

        Raises:
            ContextCancelledError: The stop signal fired before or during the request.
            TransportError: The endpoint was unreachable or returned an error status.
            MissingJsonPathError: A JSON response arrived but no json path is set.
            ExtractionError: The JSON payload could not be queried.
            InvalidAddressFormatError: The response is not an address of this stack.
            LocalAddressRejectedError: The address is local and policy is Ignore.
        """
        if self._stack == NetworkStack.IPV6:
            return await self._detect_v6()
        return await self._detect_v4()

    # ---------------------------------------------------------------------------
    # Stack-specific paths
    # ---------------------------------------------------------------------------

    async def _detect_v4(self) -> str:
        candidate = await self._request_address()
        return evaluate_candidate(candidate, NetworkStack.IPV4, self._policy)

    async def _detect_v6(self) -> str:
        candidate = await self._request_address()
        return evaluate_candidate(candidate, NetworkStack.IPV6, self._policy)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _request_address(self) -> str:
        """
        Fetches the endpoint and returns the raw, unvalidated candidate.

        JSON parsing is used when the response declares application/json OR
        a json path is configured; a configured json path wins over a
        plain-text content type.
        """
        auth = None
        if self._username or self._password:
            auth = httpx.BasicAuth(self._username, self._password)

        self._logger.debug("Requesting address from %s params=%s", self._url, self._params)
        try:
            response = await run_until_stopped(
                self._client.get(
                    self._url,
                    params=self._params,
                    headers=self._headers,
                    auth=auth,
                    timeout=REQUEST_TIMEOUT_SECONDS,
                ),
                REQUEST_TIMEOUT_SECONDS,
                self._stop_event,
            )
            response.raise_for_status()
        except StopRequested as exc:
            raise ContextCancelledError(f"request to {self._url} cancelled") from exc
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"Address provider {self._url} did not answer within {REQUEST_TIMEOUT_SECONDS:g}s."
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Address provider returned status {exc.response.status_code}."
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"Could not reach address provider ({self._url}): {exc}"
            ) from exc

        body = response.content
        # NOTE: httpx.Headers lookups are case-insensitive, so both
        # "Content-Type" and "content-type" are matched here.
        content_type = response.headers.get("content-type", "")

        if "application/json" in content_type or self._json_path:
            self._logger.debug("Extracting address from JSON data using jsonpath %r", self._json_path)
            if not self._json_path:
                raise MissingJsonPathError(
                    f"{self._url} returned {content_type} but no jsonpath is specified"
                )
            value = await self._extractor.extract(body, self._json_path)
            return value.strip()

        candidate = response.text.strip()
        self._logger.debug("Using response body as address directly: %r", candidate)
        return candidate
