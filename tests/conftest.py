"""
Pytest Configuration and Shared Fixtures

Provides stub providers, registries and sample symptom selections so the
whole suite runs offline without API keys.
"""

import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from mimucare.agents.catalog import SymptomSession
from mimucare.config import Settings
from mimucare.directory import StaticDoctorDirectory
from mimucare.providers import ProviderAdapter, ProviderId, ProviderRegistry
from mimucare.storage import InMemoryStore


class StubProvider(ProviderAdapter):
    """
    Deterministic provider with call tracking.

    Replies with ``reply``, or raises ``error`` if given. ``delay`` makes the
    call sleep first so timeouts and cancellation can be exercised.
    """

    def __init__(self, provider_id, reply="", error=None, delay=0.0, display_name=None):
        super().__init__()
        self.provider_id = provider_id
        self.display_name = display_name or provider_id.value
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []
        self.cancelled = False

    async def _complete(self, prompt, locale):
        self.calls.append((prompt, locale))
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return self.reply


def armed(provider):
    provider.configure("test-key")
    return provider


@pytest.fixture
def make_registry():
    """Build a registry of armed stub providers in the given order."""
    def _make(*providers):
        return ProviderRegistry([armed(p) for p in providers])
    return _make


@pytest.fixture
def empty_registry():
    return ProviderRegistry([
        StubProvider(ProviderId.GEMINI),
        StubProvider(ProviderId.OPENAI),
        StubProvider(ProviderId.DEEPSEEK),
    ])


@pytest.fixture
def test_settings():
    """Settings with no credentials and no data directory."""
    return Settings(
        GEMINI_API_KEY="",
        OPENAI_API_KEY="",
        DEEPSEEK_API_KEY="",
        DEFAULT_LOCALE="en",
        DATA_DIR="",
        PROVIDER_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
def directory():
    return StaticDoctorDirectory.from_json()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 1, 8, 0, 0, tzinfo=ZoneInfo("Asia/Dhaka"))


@pytest.fixture
def make_selection():
    """Build a list of SelectedSymptom from (id, intensity) pairs."""
    def _make(*picks, duration="few-days"):
        session = SymptomSession()
        for symptom_id, intensity in picks:
            session.select(symptom_id, duration, intensity)
        return session.selected
    return _make
