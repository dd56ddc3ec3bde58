"""
detectors/interface_detector.py

Responsibility: Detects the host's address by reading the addresses bound to
a local network interface and choosing one according to local address policy.
Does NOT: make HTTP calls or configure interfaces.
"""

from __future__ import annotations

import logging
import socket
from typing import Optional

import psutil

from config import LocalAddressPolicy, NetworkStack
from exceptions import InterfaceNotFoundError
from services.address_policy import choose_address

logger = logging.getLogger(__name__)


class InterfaceAddressDetector:
    """
    Implements AddressDetector by inspecting a named network interface.

    Collaborators:
        - psutil: lists interface addresses
    """

    def __init__(
        self,
        interface_name: str,
        stack: NetworkStack,
        local_address_policy: LocalAddressPolicy = LocalAddressPolicy.IGNORE,
        detector_logger: Optional[logging.Logger] = None,
    ) -> None:
        self._interface = interface_name
        self._stack = stack
        self._policy = local_address_policy
        self._logger = detector_logger or logger

    async def detect(self) -> str:
        """
        Returns the interface address selected by the local address policy.

        Raises:
            InterfaceNotFoundError: The interface does not exist.
            NoAddressFoundError: It has no address of the configured stack.
            LocalAddressRejectedError: It only has local addresses and policy is Ignore.
        """
        family = socket.AF_INET6 if self._stack == NetworkStack.IPV6 else socket.AF_INET

        all_addresses = psutil.net_if_addrs()
        if self._interface not in all_addresses:
            raise InterfaceNotFoundError(f"interface {self._interface!r} not found")

        # Link-local IPv6 addresses carry a zone suffix ("fe80::1%eth0")
        candidates = [
            entry.address.split("%", 1)[0]
            for entry in all_addresses[self._interface]
            if entry.family == family
        ]
        self._logger.debug("Interface %s has %s candidates %s", self._interface, self._stack.value, candidates)
        return choose_address(candidates, self._stack, self._policy)
