import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Sets PROTEAN_ENV so the ordering domain picks the right overlay from domain.toml.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def _ordering_domain():
    """Initialize the ordering domain once per session."""
    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(scope="session", autouse=True)
def setup_db(_ordering_domain):
    from ordering.utils.db import drop_db, setup_db

    setup_db(_ordering_domain)

    yield

    drop_db(_ordering_domain)


@pytest.fixture(autouse=True)
def test_settings():
    """Known settings for every test: fake email, fake gateway, a stable public host."""
    from notifications.channel import reset_channels
    from payments.gateway import reset_gateway
    from shared.config import override_settings, reset_settings

    reset_settings()
    reset_channels()
    reset_gateway()
    override_settings(
        public_host="https://shop.test",
        email_transport="fake",
        payment_gateway="fake",
        store_name="Ralahami.lk",
        currency_label="Rs",
        cost_ratio=0.6,
    )

    yield

    reset_settings()
    reset_channels()
    reset_gateway()


@pytest.fixture(autouse=True)
def run_around_tests(_ordering_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _ordering_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    ctx.pop()


# ---------------------------------------------------------------------------
# Shared collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def email_channel():
    """The fake email adapter the pipeline will send through."""
    from notifications.channel import get_email_channel

    return get_email_channel()


@pytest.fixture()
def gateway():
    """The fake payment gateway the pipeline will look sessions up in."""
    from payments.gateway import get_gateway

    return get_gateway()


@pytest.fixture()
def tracking():
    from receipts.tracking import TrackingTokenProvider

    return TrackingTokenProvider("https://shop.test")
