"""
services/detection_service.py

Responsibility: Runs one address detection per scheduler tick and turns any
detection failure into "skip this cycle", logging it with enough context to
act on.
Does NOT: schedule runs, retry, or update DNS records.
"""

from __future__ import annotations

import logging

from detectors.address_detector import AddressDetector
from exceptions import AddressDetectionError

logger = logging.getLogger(__name__)


class DetectionService:
    """
    Caller-facing wrapper around a single AddressDetector.

    A DNS updater calls current_address() once per tick and skips its update
    whenever None comes back.

    Collaborators:
        - AddressDetector: any detector built by create_detector()
    """

    def __init__(self, detector: AddressDetector, name: str = "default") -> None:
        """
        Args:
            detector: The detector to run.
            name: Label used in log messages, e.g. the DDNS spec name.
        """
        self._detector = detector
        self._name = name

    async def current_address(self) -> str | None:
        """
        Detects the current address.

        Returns:
            The validated address, or None when this cycle should be skipped.
        """
        try:
            address = await self._detector.detect()
        except AddressDetectionError as exc:
            logger.error("[%s] Address detection failed, skipping this cycle: %s", self._name, exc)
            return None

        logger.info("[%s] Current address: %s", self._name, address)
        return address
