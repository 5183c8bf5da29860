"""Shared test fixtures."""
import os

# Keep the app off the on-disk SQL database during tests.
os.environ.setdefault("SLOT_STORE", "memory")

from datetime import time

import pytest

from booking_core.scheduling.types import BusinessHours
from tests.helpers import RecordingGateway


@pytest.fixture
def business_hours() -> BusinessHours:
    return BusinessHours(
        opening_time=time(9, 0),
        closing_time=time(17, 0),
        slot_granularity_minutes=30,
        timezone="UTC",
    )


@pytest.fixture
def hours_for(business_hours):
    return lambda owner_id: business_hours


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()
