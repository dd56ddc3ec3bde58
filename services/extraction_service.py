"""
services/extraction_service.py

Responsibility: Extracts a single string value from a JSON payload using a jq
query expression, under a bounded time budget.
Does NOT: make HTTP calls, validate IP addresses, or apply address policy.
"""

from __future__ import annotations

import asyncio
import json
import logging
import multiprocessing
from multiprocessing.connection import Connection
from typing import Any, Optional, Protocol, runtime_checkable

import jq

from exceptions import (
    EmptyPayloadError,
    EmptyQueryError,
    InvalidQueryError,
    MalformedPayloadError,
    NonScalarResultError,
    QueryEvaluationError,
    QueryTimeoutError,
)
from services.cancellation import StopRequested, run_until_stopped

logger = logging.getLogger(__name__)

# Budget for a single query evaluation, independent of the HTTP timeout
QUERY_TIMEOUT_SECONDS = 3.0

# How often the parent checks the worker's pipe for a result
_POLL_INTERVAL_SECONDS = 0.01

# NOTE: jq evaluation holds the GIL, so it runs in a child process that can be
# killed when the deadline passes or the stop signal fires.
_MP_CONTEXT = multiprocessing.get_context("spawn")

# libjq ends the output stream silently on any halt. `halt` (no value) stays
# "no match"; halt_error with a non-null value is turned into a runtime error.
_HALT_PRELUDE = (
    'def halt_error($code): if . == null then halt else error("halt_error: \\(tojson)") end; '
    "def halt_error: halt_error(5); "
)


@runtime_checkable
class JsonExtractor(Protocol):
    """
    Narrow interface for pulling one scalar string out of a JSON payload.

    ThirdPartyAddressDetector depends on this abstraction so the query
    language stays an implementation detail.
    """

    async def extract(self, payload: bytes, query: str) -> str:
        """
        Returns the first string the query yields, or "" when it yields none.

        Raises:
            ExtractionError: Any subclass describing why extraction failed.
        """
        ...


def _evaluate_first(query: str, document: Any, conn: Connection) -> None:
    """
    Child-process entry point: sends the first output of query over conn.

    Messages are ("value", v), ("empty", None) or ("error", message).
    """
    try:
        program = jq.compile(_HALT_PRELUDE + query)
        outputs = iter(program.input_value(document))
        try:
            conn.send(("value", next(outputs)))
        except StopIteration:
            conn.send(("empty", None))
    except ValueError as exc:
        conn.send(("error", str(exc)))
    finally:
        conn.close()


async def _run_in_child(query: str, document: Any) -> tuple[str, Any]:
    receiver, sender = _MP_CONTEXT.Pipe(duplex=False)
    process = _MP_CONTEXT.Process(
        target=_evaluate_first,
        args=(query, document, sender),
        daemon=True,
    )
    process.start()
    sender.close()
    try:
        while not receiver.poll():
            await asyncio.sleep(_POLL_INTERVAL_SECONDS)
        return receiver.recv()
    except EOFError as exc:
        raise QueryEvaluationError(f"query {query!r} worker exited without a result") from exc
    finally:
        # Runs on success, deadline and stop alike
        if process.is_alive():
            process.kill()
        process.join()
        receiver.close()


class JqExtractor:
    """
    JsonExtractor implementation backed by the jq library.

    Queries use jq syntax, e.g. ".data.ip" or ".[0].address". Evaluation
    happens in a short-lived child process so the deadline and the parent
    stop signal can terminate a runaway query.

    Collaborators:
        - jq: compiles and runs the query expression
        - asyncio.Event: optional parent stop signal shared with the detector
    """

    def __init__(
        self,
        timeout: float = QUERY_TIMEOUT_SECONDS,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """
        Args:
            timeout: Seconds allowed for one query evaluation.
            stop_event: Parent stop signal; setting it aborts the evaluation.
        """
        self._timeout = timeout
        self._stop_event = stop_event

    async def extract(self, payload: bytes, query: str) -> str:
        """
        Extracts the first value yielded by query from the JSON payload.

        Args:
            payload: Raw response body.
            query: jq expression.

        Returns:
            The first yielded string, or "" when the query yields nothing.

        Raises:
            EmptyPayloadError: payload is empty.
            EmptyQueryError: query is empty.
            MalformedPayloadError: payload is not JSON.
            InvalidQueryError: query does not compile.
            QueryTimeoutError: evaluation exceeded the budget or was stopped.
            QueryEvaluationError: the query raised an error while running.
            NonScalarResultError: the first result is not a string.
        """
        if not payload:
            raise EmptyPayloadError("response is empty")
        if not query:
            raise EmptyQueryError("jsonpath is empty")

        try:
            document = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedPayloadError(f"response is not valid JSON: {exc}") from exc

        try:
            jq.compile(query)
        except ValueError as exc:
            raise InvalidQueryError(f"invalid query {query!r}: {exc}") from exc

        try:
            kind, result = await run_until_stopped(
                _run_in_child(query, document),
                self._timeout,
                self._stop_event,
            )
        except StopRequested as exc:
            raise QueryTimeoutError(f"query {query!r} cancelled") from exc
        except asyncio.TimeoutError as exc:
            raise QueryTimeoutError(
                f"query {query!r} did not finish within {self._timeout:g}s"
            ) from exc

        if kind == "error":
            raise QueryEvaluationError(f"query evaluation failed: {result}")

        if kind == "empty":
            logger.debug("Query %r yielded no value.", query)
            return ""

        if not isinstance(result, str):
            raise NonScalarResultError(
                f"query {query!r} yielded {json.dumps(result)[:64]}, expected a string"
            )

        return result
