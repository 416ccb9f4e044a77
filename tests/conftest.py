import os
from pathlib import Path

import pytest

# Logging reads the environment when storefront.domain is first imported
os.environ.setdefault("ENV", "test")

from storefront.config import Settings  # noqa: E402
from storefront.container import Container  # noqa: E402
from storefront.gateway.fake_adapter import FakeGateway  # noqa: E402
from storefront.gateway.signature import SignatureVerifier  # noqa: E402

TEST_SECRET = "test_gateway_secret"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def database_url(tmp_path_factory):
    """A file database, so worker threads each get their own connection."""
    return f"sqlite:///{tmp_path_factory.mktemp('db') / 'storefront.db'}"


@pytest.fixture(scope="session")
def _storefront_domain(database_url):
    """Initialize the storefront domain once per session."""
    from storefront.domain import init_domain

    return init_domain(Settings(environment="test", database_url=database_url))


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture()
def settings(database_url):
    return Settings(
        environment="test",
        database_url=database_url,
        gateway_provider="fake",
        gateway_key_id="rzp_test_key",
        gateway_key_secret=TEST_SECRET,
        frontend_url="https://shop.example.com",
    )


@pytest.fixture()
def verifier():
    return SignatureVerifier(TEST_SECRET)


@pytest.fixture()
def gateway(verifier):
    return FakeGateway(verifier)


@pytest.fixture()
def container(settings, gateway):
    return Container.build(settings, gateway=gateway)
