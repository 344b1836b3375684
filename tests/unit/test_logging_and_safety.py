import logging

from rechantic import ApiVersion, RechargeClient
from rechantic._logging import redact_token
from rechantic.pagination import Paginator
from tests.helpers.responses import TEST_TOKEN, json_response, make_response

# --- Tests ---


def test_pagination_logging_lifecycle(mock_client, body_pages, caplog):
    """Verify that pagination logs its start, each page and its end."""
    mock_client.connector.get.side_effect = body_pages
    caplog.set_level(logging.DEBUG, logger="rechantic")

    items = Paginator(mock_client, "/charges", items_key="charges").all()

    assert len(items) == 5
    assert caplog.text.count("Starting pagination") == 1  # INFO
    assert caplog.text.count("Fetched page") == 3  # DEBUG
    assert "Pagination finished" in caplog.text  # INFO

    # We verify that 'extra' fields are present in the log records
    finished = [r for r in caplog.records if r.getMessage() == "Pagination finished"]
    assert finished[0].endpoint == "/charges"
    assert finished[0].fetches == 3
    assert finished[0].items == 5


def test_cursors_are_never_logged_raw(mock_client, caplog):
    """Cursor tokens only appear in logs as hashes."""
    secret_cursor = "eyJsYXN0X2lkIjogOTk5fQ"
    mock_client.connector.get.side_effect = [
        make_response({"charges": [{"id": 1}], "next_cursor": secret_cursor}),
        make_response({"charges": [{"id": 2}], "next_cursor": secret_cursor}),
    ]
    caplog.set_level(logging.DEBUG, logger="rechantic")

    Paginator(mock_client, "/charges", items_key="charges").all()

    assert secret_cursor not in caplog.text
    for record in caplog.records:
        assert secret_cursor not in str(record.__dict__)
    assert "same cursor twice" in caplog.text  # WARNING


def test_access_token_is_never_logged(transport_client, caplog):
    """The Connector logs a token hash, never the token."""
    caplog.set_level(logging.DEBUG, logger="rechantic")
    client, _ = transport_client(lambda request: json_response({"customers": []}))

    client.get("/customers")

    assert "Sending request" in caplog.text
    for record in caplog.records:
        assert TEST_TOKEN not in str(record.__dict__)
    sending = [r for r in caplog.records if r.getMessage() == "Sending request"]
    assert sending[0].token_hash == redact_token(TEST_TOKEN)


def test_rate_limit_warning(transport_client, caplog):
    """A warning is logged when the remaining budget drops below 10%."""
    caplog.set_level(logging.WARNING, logger="rechantic")
    client, _ = transport_client(
        lambda request: json_response(
            {}, headers={"X-RateLimit-Limit": "40", "X-RateLimit-Remaining": "2"}
        )
    )

    client.get("/customers")

    assert "Approaching API rate limit" in caplog.text


def test_redact_token():
    """Verify that hashing is stable, short and never echoes the input."""
    assert redact_token(None) is None
    assert redact_token("abc") == redact_token("abc")
    assert redact_token("abc") != redact_token("abd")
    assert len(redact_token("sk_live_123456")) == 8
    assert "sk_live" not in redact_token("sk_live_123456")


def test_version_switch_is_logged(caplog):
    """Switching versions logs both versions at DEBUG."""
    caplog.set_level(logging.DEBUG, logger="rechantic")

    with RechargeClient(TEST_TOKEN, api_version=ApiVersion.V2021_01) as client:
        with client.use_version(ApiVersion.V2021_11):
            pass

    switched = [r for r in caplog.records if r.getMessage() == "Switched API version"]
    assert switched[0].from_version == "2021-01"
    assert switched[0].to_version == "2021-11"
    assert "Restored API version" in caplog.text
