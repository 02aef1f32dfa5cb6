"""Fixtures for AWS client tests.

Provides a factory-as-fixture for configurable fake boto3 clients.
"""

from typing import Any, Dict, Optional

import pytest


class FakeClient:
    """Configurable fake boto3 client for unit tests.

    API methods are looked up in ``api_responses``; a value may be a static
    response or a callable receiving the call kwargs.
    """

    def __init__(self, api_responses: Optional[Dict[str, Any]] = None):
        self._api_responses = api_responses or {}
        self.calls: list = []

    def __getattr__(self, name: str):
        if name.startswith("_") or name not in self._api_responses:
            raise AttributeError(name)
        resp = self._api_responses[name]

        def _call(*_args, **kwargs):
            self.calls.append((name, kwargs))
            if callable(resp):
                return resp(**kwargs)
            return resp

        return _call


@pytest.fixture
def make_fake_client():
    """Factory fixture for creating configurable fake boto3 clients.

    Usage:
        def test_something(monkeypatch, make_fake_client):
            client = make_fake_client(api_responses={"get_item": {...}})
            monkeypatch.setattr(aws_client, "get_boto3_client", lambda *a, **k: client)
    """

    def _factory(api_responses: Optional[Dict[str, Any]] = None) -> FakeClient:
        return FakeClient(api_responses=api_responses)

    return _factory
