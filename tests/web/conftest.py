"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import venue_flow.web.app as web_app
from venue_flow.data.loader import sample_dataset
from venue_flow.web.service import PlaybackService


@pytest.fixture
def service(monkeypatch) -> PlaybackService:
    """A service over the built-in samples, installed as the app's service."""
    svc = PlaybackService(sample_dataset())
    monkeypatch.setattr(web_app, "_service", svc)
    return svc


@pytest.fixture
def client(service):
    """FastAPI test client."""
    with TestClient(web_app.app) as c:
        yield c


@pytest.fixture
def session_id(client) -> str:
    resp = client.post("/api/sessions")
    return resp.json()["session_id"]
