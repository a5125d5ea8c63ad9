from unittest.mock import MagicMock

import pytest
import requests

from reading_core.errors import InputError, NotFoundError, PersistenceError
from remedial_session import SessionApiClient


def fake_response(status, body=None, reason="OK"):
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.reason = reason
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


def make_client(response=None, error=None):
    http = MagicMock(spec=requests.Session)
    if error is not None:
        http.request.side_effect = error
    else:
        http.request.return_value = response
    return SessionApiClient("http://localhost:5000/", timeout=3, http=http), http


def test_submit_posts_payload():
    client, http = make_client(fake_response(200, {"success": True, "sessionId": 5}))

    body = client.submit_session({"studentId": "S-1"})

    assert body["sessionId"] == 5
    http.request.assert_called_once_with(
        "post", "http://localhost:5000/api/remedial/session", timeout=3, json={"studentId": "S-1"}
    )


def test_fetch_progress_sends_query_params():
    client, http = make_client(fake_response(200, {"success": True, "found": False}))

    assert client.fetch_progress("S-1", 7)["found"] is False
    _, kwargs = http.request.call_args
    assert kwargs["params"] == {"studentId": "S-1", "approvedScheduleId": 7}


def test_fetch_status_unwraps_map():
    status = {"S-1": {"completed": True, "hasProgress": True}}
    client, _ = make_client(fake_response(200, {"success": True, "statusByStudent": status}))

    assert client.fetch_status(7, 2, ["S-1"]) == status


@pytest.mark.parametrize("status,error", [(400, InputError), (404, NotFoundError), (500, PersistenceError)])
def test_error_statuses_map_to_errors(status, error):
    client, _ = make_client(fake_response(status, {"success": False, "error": "Nope."}, reason="Bad"))

    with pytest.raises(error) as excinfo:
        client.submit_session({})
    assert excinfo.value.message == "Nope."


def test_non_json_error_body_uses_reason():
    client, _ = make_client(fake_response(502, None, reason="Bad Gateway"))

    with pytest.raises(PersistenceError) as excinfo:
        client.submit_session({})
    assert excinfo.value.message == "Bad Gateway"


def test_network_failure_is_a_persistence_error():
    client, _ = make_client(error=requests.ConnectionError("refused"))

    with pytest.raises(PersistenceError):
        client.fetch_progress("S-1", 7)
