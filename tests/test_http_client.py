"""
Unit tests for http_client module
"""
from unittest.mock import MagicMock

import pytest
import requests

from verifier.errors import (
    MalformedResponse,
    PermanentFetchError,
    RangeNotFound,
    TransientFetchError,
)
from verifier.http_client import SheetsClient


def make_response(status=200, body=None, json_error=False):
    r = MagicMock()
    r.status_code = status
    r.reason = "Reason"
    r.text = "" if body is None else str(body)
    if json_error:
        r.json.side_effect = ValueError("Expecting value")
    else:
        r.json.return_value = body
    return r


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    return s


class TestSheetsClient:
    """Test SheetsClient.get_json"""

    def test_success_returns_body_and_sends_key(self, settings, session):
        session.get.return_value = make_response(200, {"values": [["A"]]})
        client = SheetsClient(settings, session=session)

        body = client.get_json("/v4/spreadsheets/sheet123", {"fields": "sheets.properties"})

        assert body == {"values": [["A"]]}
        args, kwargs = session.get.call_args
        assert args[0] == "https://sheets.googleapis.com/v4/spreadsheets/sheet123"
        assert kwargs["params"] == {"fields": "sheets.properties", "key": "test-key"}
        assert kwargs["timeout"] == settings.timeout_sec

    def test_sets_json_headers(self, settings, session):
        SheetsClient(settings, session=session)
        assert session.headers["Accept"] == "application/json"

    def test_400_is_range_not_found(self, settings, session):
        session.get.return_value = make_response(400, "Unable to parse range")
        with pytest.raises(RangeNotFound) as exc_info:
            SheetsClient(settings, session=session).get_json("/x")
        assert exc_info.value.status == 400

    def test_400_invalid_api_key_is_permanent(self, settings, session):
        body = ('{"error": {"code": 400, "message": "API key not valid. Please pass a valid API key.", '
                '"status": "INVALID_ARGUMENT"}}')
        session.get.return_value = make_response(400, body)
        with pytest.raises(PermanentFetchError) as exc_info:
            SheetsClient(settings, session=session).get_json("/x")
        assert not isinstance(exc_info.value, RangeNotFound)
        assert exc_info.value.status == 400

    @pytest.mark.parametrize("status", [429, 500, 503])
    def test_retryable_status(self, settings, session, status):
        session.get.return_value = make_response(status, "busy")
        with pytest.raises(TransientFetchError) as exc_info:
            SheetsClient(settings, session=session).get_json("/x")
        assert exc_info.value.status == status

    @pytest.mark.parametrize("status", [403, 404])
    def test_permanent_status(self, settings, session, status):
        session.get.return_value = make_response(status, "nope")
        with pytest.raises(PermanentFetchError) as exc_info:
            SheetsClient(settings, session=session).get_json("/x")
        assert exc_info.value.status == status
        assert exc_info.value.path == "/x"

    def test_network_error_is_transient(self, settings, session):
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(TransientFetchError) as exc_info:
            SheetsClient(settings, session=session).get_json("/x")
        assert exc_info.value.status == 0

    def test_invalid_json(self, settings, session):
        session.get.return_value = make_response(200, "<html>", json_error=True)
        with pytest.raises(MalformedResponse):
            SheetsClient(settings, session=session).get_json("/x")

    def test_non_object_json(self, settings, session):
        session.get.return_value = make_response(200, [1, 2, 3])
        with pytest.raises(MalformedResponse):
            SheetsClient(settings, session=session).get_json("/x")

    def test_error_message_does_not_leak_key(self, settings, session):
        session.get.return_value = make_response(500, "oops")
        with pytest.raises(TransientFetchError) as exc_info:
            SheetsClient(settings, session=session).get_json("/x")
        assert "test-key" not in str(exc_info.value)

    def test_context_manager_closes_session(self, settings, session):
        with SheetsClient(settings, session=session):
            pass
        session.close.assert_called_once()
