"""Shared fixtures for vuln-explain tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from vuln_explain.auditor import AuditService
from vuln_explain.cache import TTLCache
from vuln_explain.config import Settings
from vuln_explain.main import create_app

from .fakes import FakeFetcher, FakeProvider


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def cache():
    return TTLCache(default_ttl=3600)


@pytest.fixture
def make_client(fake_fetcher, cache):
    """Build an async test client around a FakeProvider with the given responses."""

    def _make(*responses):
        provider = FakeProvider(*responses)
        service = AuditService(provider=provider, fetcher=fake_fetcher, cache=cache)
        app = create_app(Settings(), service=service)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        return client, provider

    return _make
