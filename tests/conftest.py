"""
Shared fixtures: a virtual clock, scripted faults and a seeded API service.
"""
import random

import pytest

from creatorpulse_client.core.clock import ManualClock
from creatorpulse_client.core.config import Settings
from creatorpulse_client.services.entity_store import DEFAULT_PASSWORD, EntityStore
from creatorpulse_client.services.facade import create_api_service
from creatorpulse_client.services.network import ScriptedFaultInjector
from creatorpulse_client.services.seed_data import DEMO_EMAIL, seed_demo_data


@pytest.fixture
def clock():
    """Virtual clock starting at 2025-01-15 09:00 UTC."""
    return ManualClock()


@pytest.fixture
def faults():
    """Fault injector that never fails unless a test scripts rolls."""
    return ScriptedFaultInjector()


@pytest.fixture
def settings():
    """Offline settings with latency switched off."""
    return Settings(
        _env_file=None,
        remote_enabled=False,
        simulate_latency=False,
        simulation_seed=42,
        seed_demo_data=True,
        session_storage_path=None,
    )


@pytest.fixture
def seeded_store(clock):
    store = EntityStore()
    seed_demo_data(store, clock.now())
    return store


@pytest.fixture
async def api(settings, clock, faults):
    """API service over the demo dataset, simulated path only."""
    service = create_api_service(settings, clock=clock, fault_injector=faults, rng=random.Random(7))
    yield service
    await service.aclose()


@pytest.fixture
async def demo_api(api):
    """API service with the demo user logged in."""
    response = await api.login(DEMO_EMAIL, DEFAULT_PASSWORD)
    assert response.success
    return api


def _style_sample(index: int = 0) -> str:
    return (
        f"Post number {index}: shipping small changes every day beats a big release "
        "every quarter, and our team has the incident graphs to prove it."
    )


@pytest.fixture
def make_post():
    """Factory for style samples comfortably inside the length limits."""
    return _style_sample
