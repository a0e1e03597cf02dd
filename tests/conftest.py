import pytest


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def listener(events):
    return events.append
