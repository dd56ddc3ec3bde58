"""
services/address_classifier.py

Responsibility: Decides whether a string is a valid IPv4/IPv6 literal and
whether it falls in a private/local-use range.
Does NOT: make network calls, apply local address policy, or raise errors.
"""

from __future__ import annotations

import ipaddress

_PRIVATE_V4_NETWORKS = (
    ipaddress.IPv4Network("10.0.0.0/8"),
    ipaddress.IPv4Network("172.16.0.0/12"),
    ipaddress.IPv4Network("192.168.0.0/16"),
    ipaddress.IPv4Network("127.0.0.0/8"),
    ipaddress.IPv4Network("169.254.0.0/16"),
)

_PRIVATE_V6_NETWORKS = (
    ipaddress.IPv6Network("fc00::/7"),
    ipaddress.IPv6Network("::1/128"),
    ipaddress.IPv6Network("fe80::/10"),
)


def _parse(value: object) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    if not isinstance(value, str) or not value:
        return None
    # NOTE: ipaddress accepts scoped literals ("fe80::1%eth0"); a zone is not
    # part of an address literal so it is rejected here.
    if "%" in value:
        return None
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return None


def is_valid_v4(value: object) -> bool:
    """
    Returns True iff value is a dotted-decimal IPv4 literal.

    Exactly four octets in [0, 255]; leading zeros, whitespace and any other
    surrounding characters are rejected.
    """
    return isinstance(_parse(value), ipaddress.IPv4Address)


def is_valid_v6(value: object) -> bool:
    """Returns True iff value is an IPv6 literal, including compressed and IPv4-mixed forms."""
    return isinstance(_parse(value), ipaddress.IPv6Address)


def is_private(value: object) -> bool:
    """
    Returns True iff value is a private, loopback or link-local literal.

    The rule set is picked from the literal's family. IPv4-mapped IPv6
    literals (::ffff:a.b.c.d) are judged by the embedded IPv4 address.
    Malformed input returns False.
    """
    address = _parse(value)
    if address is None:
        return False

    if isinstance(address, ipaddress.IPv6Address):
        if address.ipv4_mapped is not None:
            address = address.ipv4_mapped
        else:
            return any(address in network for network in _PRIVATE_V6_NETWORKS)

    return any(address in network for network in _PRIVATE_V4_NETWORKS)
