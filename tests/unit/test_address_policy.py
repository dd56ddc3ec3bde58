"""
tests/unit/test_address_policy.py

Unit tests for services/address_policy.py.
"""

from __future__ import annotations

import pytest

from config import LocalAddressPolicy, NetworkStack
from exceptions import InvalidAddressFormatError, LocalAddressRejectedError, NoAddressFoundError
from services.address_policy import choose_address, evaluate_candidate


# ---------------------------------------------------------------------------
# evaluate_candidate
# ---------------------------------------------------------------------------


def test_public_v4_is_accepted_under_ignore():
    assert evaluate_candidate("8.8.8.8", NetworkStack.IPV4, LocalAddressPolicy.IGNORE) == "8.8.8.8"


def test_private_v4_is_rejected_under_ignore():
    with pytest.raises(LocalAddressRejectedError) as exc_info:
        evaluate_candidate("192.168.1.1", NetworkStack.IPV4, LocalAddressPolicy.IGNORE)

    assert exc_info.value.address == "192.168.1.1"
    assert "local address is ignored" in str(exc_info.value)


def test_private_v6_rejection_mentions_ula():
    with pytest.raises(LocalAddressRejectedError) as exc_info:
        evaluate_candidate("fd00::1", NetworkStack.IPV6, LocalAddressPolicy.IGNORE)

    assert exc_info.value.stack == NetworkStack.IPV6
    assert "ULA address is ignored" in str(exc_info.value)


@pytest.mark.parametrize("policy", [LocalAddressPolicy.ALLOW, LocalAddressPolicy.PREFER])
def test_private_address_is_accepted_when_policy_permits(policy):
    assert evaluate_candidate("10.0.0.1", NetworkStack.IPV4, policy) == "10.0.0.1"
    assert evaluate_candidate("fc00::1", NetworkStack.IPV6, policy) == "fc00::1"


def test_wrong_family_is_rejected_as_invalid_format():
    """An IPv6 literal on an IPv4 detector must not slip through."""
    with pytest.raises(InvalidAddressFormatError) as exc_info:
        evaluate_candidate("2001:4860:4860::8888", NetworkStack.IPV4, LocalAddressPolicy.ALLOW)
    assert exc_info.value.address == "2001:4860:4860::8888"

    with pytest.raises(InvalidAddressFormatError):
        evaluate_candidate("8.8.8.8", NetworkStack.IPV6, LocalAddressPolicy.ALLOW)


def test_garbage_is_rejected_as_invalid_format():
    with pytest.raises(InvalidAddressFormatError):
        evaluate_candidate("<html>oops</html>", NetworkStack.IPV4, LocalAddressPolicy.IGNORE)


# ---------------------------------------------------------------------------
# choose_address
# ---------------------------------------------------------------------------

_MIXED = ["10.0.0.5", "203.0.113.7", "198.51.100.2"]


def test_choose_ignore_takes_first_public():
    assert choose_address(_MIXED, NetworkStack.IPV4, LocalAddressPolicy.IGNORE) == "203.0.113.7"


def test_choose_allow_prefers_public_over_local():
    assert choose_address(_MIXED, NetworkStack.IPV4, LocalAddressPolicy.ALLOW) == "203.0.113.7"


def test_choose_allow_falls_back_to_local():
    assert choose_address(["10.0.0.5"], NetworkStack.IPV4, LocalAddressPolicy.ALLOW) == "10.0.0.5"


def test_choose_prefer_takes_local_even_with_public_present():
    assert choose_address(_MIXED, NetworkStack.IPV4, LocalAddressPolicy.PREFER) == "10.0.0.5"


def test_choose_prefer_falls_back_to_public():
    assert choose_address(["203.0.113.7"], NetworkStack.IPV4, LocalAddressPolicy.PREFER) == "203.0.113.7"


def test_choose_ignore_with_only_local_raises_rejection():
    with pytest.raises(LocalAddressRejectedError):
        choose_address(["fe80::1", "fd00::2"], NetworkStack.IPV6, LocalAddressPolicy.IGNORE)


def test_choose_skips_other_family_and_raises_when_nothing_left():
    with pytest.raises(NoAddressFoundError):
        choose_address(["2001:db8::1", "bogus"], NetworkStack.IPV4, LocalAddressPolicy.ALLOW)
