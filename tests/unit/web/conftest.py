"""Shared fixtures for web route tests.

Provides a test FastAPI app running in mock mode (no vendor keys, no Redis)
and a TestClient that runs the application lifespan, so that route tests
never hit real vendors or a real Redis.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from Market_Edge.config import Settings
from Market_Edge.web.app import create_app


@pytest.fixture()
def settings() -> Settings:
    """Settings with every vendor disabled and in-process cache and bus."""
    return Settings(
        redis_url="",
        finnhub_api_key="",
        twelve_data_api_key="",
        fmp_api_key="",
        eodhd_api_key="",
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    """TestClient inside the lifespan, so app.state is populated."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
