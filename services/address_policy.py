"""
services/address_policy.py

Responsibility: Applies stack selection and local address policy to detected
candidates, turning them into a final address or a typed rejection.
Does NOT: obtain candidates (see detectors/) or make network calls.
"""

from __future__ import annotations

import logging
from typing import Iterable

from config import LocalAddressPolicy, NetworkStack
from exceptions import (
    InvalidAddressFormatError,
    LocalAddressRejectedError,
    NoAddressFoundError,
)
from services.address_classifier import is_private, is_valid_v4, is_valid_v6

logger = logging.getLogger(__name__)


def is_valid_for_stack(candidate: str, stack: NetworkStack) -> bool:
    """Returns True iff candidate is a literal of the stack's address family."""
    if stack == NetworkStack.IPV6:
        return is_valid_v6(candidate)
    return is_valid_v4(candidate)


def evaluate_candidate(
    candidate: str,
    stack: NetworkStack,
    policy: LocalAddressPolicy,
) -> str:
    """
    Validates a single raw candidate for the given stack and policy.

    Allow and Prefer are equivalent here: with one candidate there is nothing
    to prefer over, so both simply accept a local address.

    Args:
        candidate: The unvalidated address string from a detector.
        stack: Address family the detection runs for.
        policy: Resolved local address policy.

    Returns:
        The candidate, unchanged, when accepted.

    Raises:
        InvalidAddressFormatError: Malformed, or a literal of the other family.
        LocalAddressRejectedError: Private/local candidate under policy Ignore.
    """
    if not is_valid_for_stack(candidate, stack):
        raise InvalidAddressFormatError(candidate)

    if is_private(candidate) and policy == LocalAddressPolicy.IGNORE:
        raise LocalAddressRejectedError(candidate, stack)

    return candidate


def choose_address(
    candidates: Iterable[str],
    stack: NetworkStack,
    policy: LocalAddressPolicy,
) -> str:
    """
    Picks one address out of several candidates according to policy.

    Candidates that are not literals of the stack's family are skipped.
    Ignore takes the first public address. Allow takes the first public
    address and falls back to the first local one. Prefer takes the first
    local address and falls back to the first public one.

    Args:
        candidates: Addresses in discovery order.
        stack: Address family the detection runs for.
        policy: Resolved local address policy.

    Returns:
        The chosen literal.

    Raises:
        NoAddressFoundError: No candidate of the stack's family exists.
        LocalAddressRejectedError: Only local candidates exist under Ignore.
    """
    public: list[str] = []
    local: list[str] = []
    for candidate in candidates:
        if not is_valid_for_stack(candidate, stack):
            logger.debug("Skipping %s candidate %r.", stack.value, candidate)
            continue
        (local if is_private(candidate) else public).append(candidate)

    if policy == LocalAddressPolicy.PREFER:
        ordered = local + public
    elif policy == LocalAddressPolicy.ALLOW:
        ordered = public + local
    else:
        ordered = public

    if ordered:
        return ordered[0]
    if local:
        raise LocalAddressRejectedError(local[0], stack)
    raise NoAddressFoundError(f"no {stack.value} address found")
