"""
detectors/detector_factory.py

Responsibility: Resolves an AddressDetectionSpec into exactly one concrete
AddressDetector, applying defaults for every optional field.
Does NOT: perform detection or read configuration files.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from config import AddressDetectionSpec, AddressDetectionType, LocalAddressPolicy, NetworkStack
from detectors.address_detector import AddressDetector
from detectors.interface_detector import InterfaceAddressDetector
from detectors.thirdparty_detector import ThirdPartyAddressDetector
from exceptions import DetectorConfigError

logger = logging.getLogger(__name__)


def create_detector(
    spec: AddressDetectionSpec,
    stack: NetworkStack,
    http_client: httpx.AsyncClient,
    stop_event: Optional[asyncio.Event] = None,
    detector_logger: Optional[logging.Logger] = None,
) -> AddressDetector:
    """
    Builds the detector variant selected by spec.type.

    Absent optional text fields become "", absent maps become {} and an absent
    local address policy becomes Ignore, so detectors never branch on "unset".

    Args:
        spec: The detection spec.
        stack: Address family to detect.
        http_client: Shared client used by the third-party variant.
        stop_event: Parent stop signal shared by every call of the detector.
        detector_logger: Logger handed to the detector.

    Returns:
        A ready-to-use AddressDetector.

    Raises:
        DetectorConfigError: The sub-spec matching spec.type is missing.
    """
    policy = spec.local_address_policy or LocalAddressPolicy.IGNORE

    if spec.type == AddressDetectionType.THIRD_PARTY:
        api = spec.api
        if api is None:
            raise DetectorConfigError("detection type ThirdParty requires an 'api' section.")
        logger.debug("Creating third-party %s detector for %s (policy=%s).", stack.value, api.url, policy.value)
        return ThirdPartyAddressDetector(
            http_client=http_client,
            url=api.url,
            stack=stack,
            json_path=api.json_path or "",
            params=dict(api.params or {}),
            headers=dict(api.headers or {}),
            username=api.username or "",
            password=api.password or "",
            local_address_policy=policy,
            stop_event=stop_event,
            detector_logger=detector_logger,
        )

    if spec.type == AddressDetectionType.INTERFACE:
        if spec.interface is None:
            raise DetectorConfigError("detection type Interface requires an 'interface' section.")
        logger.debug("Creating interface %s detector for %s (policy=%s).", stack.value, spec.interface.name, policy.value)
        return InterfaceAddressDetector(
            interface_name=spec.interface.name,
            stack=stack,
            local_address_policy=policy,
            detector_logger=detector_logger,
        )

    raise DetectorConfigError(f"Unsupported detection type: {spec.type!r}")
