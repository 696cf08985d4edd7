"""Shared fixtures: settings pointing at a fake OpenProject and a client bound to it."""
import pytest
import pytest_asyncio

from openproject_core.client import OpenProjectClient, create_http_client
from openproject_core.config import Settings

from tests.payloads import BASE_URL


@pytest.fixture
def settings(tmp_path):
    return Settings(api_url=BASE_URL, api_key="secret-key", scratch_root=tmp_path)


@pytest_asyncio.fixture
async def client(settings):
    async with create_http_client(settings) as http:
        yield OpenProjectClient(http)
