"""
detectors/address_detector.py

Responsibility: Defines the AddressDetector Protocol shared by every detector
variant.
Does NOT: make HTTP calls, read interfaces, or implement any detection logic.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AddressDetector(Protocol):
    """
    Abstract protocol for obtaining the host's current address.

    Implementations (ThirdPartyAddressDetector, InterfaceAddressDetector) are
    built once per detection spec by create_detector() and then invoked once
    per scheduler tick. They keep no state between calls: every detect()
    performs a fresh lookup.
    """

    async def detect(self) -> str:
        """
        Detects, validates and returns the current address.

        Returns:
            An IPv4 or IPv6 literal matching the detector's configured stack.

        Raises:
            AddressDetectionError: Any subclass; the caller should skip this cycle.
        """
        ...
