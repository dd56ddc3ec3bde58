"""
tests/unit/test_detection_service.py

Unit tests for services/detection_service.py.
Detectors are replaced with AsyncMock doubles.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from exceptions import DetectorConfigError, LocalAddressRejectedError, TransportError
from services.detection_service import DetectionService


@pytest.mark.asyncio
async def test_current_address_returns_detected_address():
    detector = AsyncMock()
    detector.detect.return_value = "1.2.3.4"

    assert await DetectionService(detector).current_address() == "1.2.3.4"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        TransportError("unreachable"),
        LocalAddressRejectedError("10.0.0.1", "IPv4"),
        DetectorConfigError("no api section"),
    ],
)
async def test_current_address_skips_cycle_on_detection_error(error, caplog):
    detector = AsyncMock()
    detector.detect.side_effect = error

    result = await DetectionService(detector, name="home").current_address()

    assert result is None
    assert "skipping this cycle" in caplog.text


@pytest.mark.asyncio
async def test_current_address_propagates_unrelated_errors():
    """Only detection failures mean "skip this cycle"; programming errors surface."""
    detector = AsyncMock()
    detector.detect.side_effect = RuntimeError("bug")

    with pytest.raises(RuntimeError):
        await DetectionService(detector).current_address()
