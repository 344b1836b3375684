"""
Shared pytest fixtures and configuration for Rechantic tests.

This module provides a mocked client for pagination tests (the connector
returns canned Response objects) and a factory for real RechargeClient
instances wired to httpx.MockTransport, so no test touches the network.
"""

from collections.abc import Callable
from unittest.mock import MagicMock

import httpx
import pytest

from rechantic import ApiVersion, RechargeClient
from tests.helpers.responses import TEST_TOKEN, link_header, make_response


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")


@pytest.fixture
def mock_client():
    """
    Creates a mocked RechargeClient for Paginator tests.

    Only the two attributes the Paginator reads are meaningful:
    ``api_version`` and ``connector.get``.
    """
    client = MagicMock()
    client.api_version = ApiVersion.V2021_11
    return client


@pytest.fixture
def body_pages():
    """Three 2021-11 style pages of charges (sizes 2, 2, 1), cursor in the body."""
    return [
        make_response(
            {"charges": [{"id": 1}, {"id": 2}], "next_cursor": "c2", "previous_cursor": None}
        ),
        make_response(
            {"charges": [{"id": 3}, {"id": 4}], "next_cursor": "c3", "previous_cursor": "c1"}
        ),
        make_response({"charges": [{"id": 5}], "next_cursor": None, "previous_cursor": "c2"}),
    ]


@pytest.fixture
def link_pages():
    """Three 2021-01 style pages of charges (sizes 2, 2, 1), cursor in the Link header."""
    return [
        make_response({"charges": [{"id": 1}, {"id": 2}]}, link=link_header("c2")),
        make_response({"charges": [{"id": 3}, {"id": 4}]}, link=link_header("c3", "c1")),
        make_response({"charges": [{"id": 5}]}, link=link_header(previous_token="c2")),
    ]


@pytest.fixture
def transport_client():
    """
    Factory returning a RechargeClient backed by httpx.MockTransport,
    plus the list of requests it sent.

    Usage:
        client, sent = transport_client(handler, api_version="2021-01")
    """
    clients: list[RechargeClient] = []

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        api_version: ApiVersion | str = ApiVersion.V2021_11,
    ) -> tuple[RechargeClient, list[httpx.Request]]:
        sent: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        client = RechargeClient(
            TEST_TOKEN, api_version=api_version, transport=httpx.MockTransport(recording_handler)
        )
        clients.append(client)
        return client, sent

    yield factory

    for client in clients:
        client.close()
