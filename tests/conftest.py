"""Shared fixtures."""

from typing import Dict, List

import pytest

from broker.config import Settings
from broker.services.broker import Broker
from broker.services.topics import TopicRegistry
from tests.fakes import GROUP_1, GROUP_2, OWNER, FakeClock, FakeTransport


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def topics_dict() -> Dict[str, List[str]]:
    return {"LAPTOP": [GROUP_1, GROUP_2], "MONITOR": [GROUP_2], "MOUSE": []}


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings rooted in tmp_path with no external services."""
    return Settings(
        owner_id=OWNER,
        topics_file=str(tmp_path / "groups.json"),
        state_backend="json",
        state_file=str(tmp_path / "data" / "query_state.json"),
        database_path=str(tmp_path / "data" / "broker.db"),
        gemini_api_key=None,
        attachment_send_delay=0,
        log_level="WARNING",
        log_file=str(tmp_path / "logs" / "app.log")
    )


@pytest.fixture
async def broker(test_settings, transport, clock, topics_dict):
    """Fully wired broker over the fake transport."""
    instance = Broker(
        test_settings,
        transport=transport,
        topics=TopicRegistry(topics_dict),
        clock=clock
    )
    yield instance
    await instance.shutdown()
