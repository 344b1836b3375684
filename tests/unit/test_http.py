"""
Unit tests for the HTTP connector, using httpx.MockTransport.
"""

import json

import httpx
import pytest

from rechantic import ApiVersion
from rechantic.exceptions import (
    ApiError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    RequestError,
)
from rechantic.http import RateLimitInfo, Response
from tests.helpers.responses import TEST_TOKEN, json_response


@pytest.mark.unit
class TestConnectorRequests:
    """Headers, params and body decoding."""

    def test_sends_auth_and_version_headers(self, transport_client):
        client, sent = transport_client(lambda request: json_response({"customers": []}))

        client.get("/customers")

        request = sent[0]
        assert request.method == "GET"
        assert request.url.path == "/customers"
        assert request.headers["X-Recharge-Access-Token"] == TEST_TOKEN
        assert request.headers["X-Recharge-Version"] == "2021-11"
        assert request.headers["Accept"] == "application/json"

    def test_explicit_version_overrides_active_version(self, transport_client):
        client, sent = transport_client(lambda request: json_response({}))

        client.get("/customers", api_version=ApiVersion.V2021_01)

        assert sent[0].headers["X-Recharge-Version"] == "2021-01"
        assert client.api_version is ApiVersion.V2021_11

    def test_query_params_are_encoded(self, transport_client):
        client, sent = transport_client(lambda request: json_response({}))

        client.get("/charges", {"limit": 25, "status": "queued"})

        assert sent[0].url.params["limit"] == "25"
        assert sent[0].url.params["status"] == "queued"

    def test_post_sends_json_body(self, transport_client):
        client, sent = transport_client(
            lambda request: json_response({"customer": {"id": 1}}, status_code=201)
        )

        body = client.post("/customers", {"email": "a@b.test"})

        assert body == {"customer": {"id": 1}}
        assert sent[0].method == "POST"
        assert json.loads(sent[0].content) == {"email": "a@b.test"}

    def test_empty_body_decodes_to_empty_dict(self, transport_client):
        client, _ = transport_client(lambda request: httpx.Response(204))

        assert client.delete("/customers/1") == {}

    def test_non_json_body_decodes_to_empty_dict(self, transport_client):
        client, _ = transport_client(lambda request: httpx.Response(200, content=b"<html>"))

        assert client.get("/customers") == {}

    def test_non_object_json_decodes_to_empty_dict(self, transport_client):
        client, _ = transport_client(lambda request: json_response([1, 2, 3]))

        assert client.get("/customers") == {}

    def test_response_keeps_headers(self, transport_client):
        link = '<https://api.rechargeapps.com/charges?cursor=n>; rel="next"'
        client, _ = transport_client(
            lambda request: json_response({"charges": []}, headers={"Link": link})
        )

        response = client.connector.get("/charges", api_version=ApiVersion.V2021_01)

        assert response.link == link
        assert response.get_header("link") == link


@pytest.mark.unit
class TestConnectorErrors:
    """Error statuses and transport failures are translated."""

    @pytest.mark.parametrize(
        "status_code,error_cls",
        [
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (500, ApiError),
        ],
    )
    def test_status_codes(self, transport_client, status_code, error_cls):
        client, _ = transport_client(
            lambda request: json_response({"errors": "nope"}, status_code=status_code)
        )

        with pytest.raises(error_cls) as exc_info:
            client.get("/customers/1")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.message == "nope"
        assert exc_info.value.response_body == {"errors": "nope"}

    def test_rate_limit_carries_retry_after(self, transport_client):
        client, _ = transport_client(
            lambda request: json_response(
                {"error": "slow down"}, status_code=429, headers={"Retry-After": "3"}
            )
        )

        with pytest.raises(RateLimitError) as exc_info:
            client.get("/customers")

        assert exc_info.value.retry_after == 3

    def test_transport_failure(self, transport_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = transport_client(handler)

        with pytest.raises(RequestError) as exc_info:
            client.get("/customers")

        assert "/customers" in str(exc_info.value)
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)

    def test_transport_failure_propagates_out_of_paginator(self, transport_client):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 2:
                raise httpx.ReadTimeout("timed out", request=request)
            cursor = "c2" if len(calls) == 1 else None
            return json_response({"charges": [{"id": len(calls)}], "next_cursor": cursor})

        client, _ = transport_client(handler)
        paginator = client.paginate("/charges", items_key="charges")

        assert next(paginator) == {"id": 1}
        with pytest.raises(RequestError):
            next(paginator)

        # Retrying re-issues the request for the same cursor
        assert next(paginator) == {"id": 3}
        assert calls[1].url.params["cursor"] == calls[2].url.params["cursor"] == "c2"


@pytest.mark.unit
class TestRateLimitInfo:
    """Rate limit headers are parsed but never acted on."""

    def test_from_headers(self):
        info = RateLimitInfo.from_headers(
            {"X-RateLimit-Limit": "40", "x-ratelimit-remaining": "3", "Retry-After": "abc"}
        )

        assert info.limit == 40
        assert info.remaining == 3
        assert info.retry_after is None
        assert info.is_approaching_limit() is True
        assert info.is_exhausted() is False

    def test_missing_headers(self):
        info = Response(body={}).rate_limit

        assert info == RateLimitInfo()
        assert info.is_approaching_limit() is False
        assert info.seconds_until_reset() is None

    def test_exhausted(self):
        assert RateLimitInfo(limit=40, remaining=0).is_exhausted() is True
