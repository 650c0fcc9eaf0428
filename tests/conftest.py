"""Shared fixtures for the RealtimeNumberReader tests."""

import logging

import pytest

from realtime_number_reader.geometry import CoordinateOrigin, NormalizedRect, Rect, Size
from realtime_number_reader.logger import ROOT_LOGGER_NAME
from realtime_number_reader.region_of_interest import RegionOfInterestManager


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers installed by setup_logging() so they don't outlive a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def centered_roi() -> RegionOfInterestManager:
    """Square ROI in the middle of a 1000x1000 portrait frame."""
    return RegionOfInterestManager(Rect(250.0, 250.0, 500.0, 500.0), Size(1000.0, 1000.0))


@pytest.fixture
def full_box() -> NormalizedRect:
    """Observation box covering the whole ROI."""
    return NormalizedRect.unit(CoordinateOrigin.BOTTOM_LEFT)
