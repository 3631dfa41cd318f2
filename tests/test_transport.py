import pytest
import requests

from conftest import FakeResponse, FakeSession
from linear_tui.diagnostics import DiagnosticSink
from linear_tui.errors import ErrorKind, LinearError
from linear_tui.transport import LINEAR_GRAPHQL_URL, GraphQLTransport


def _transport(*responses, sink=None):
    session = FakeSession(responses)
    return GraphQLTransport("lin_api_123", session=session, sink=sink), session


def test_sets_raw_authorization_header():
    t, session = _transport()
    assert session.headers["Authorization"] == "lin_api_123"
    assert session.headers["Content-Type"] == "application/json"
    assert t.url == LINEAR_GRAPHQL_URL


def test_returns_data_and_omits_empty_variables():
    t, session = _transport(FakeResponse(200, {"data": {"viewer": {"id": "u1"}}}))
    assert t.execute(None, "query { viewer { id } }") == {"viewer": {"id": "u1"}}
    assert session.calls[0].json == {"query": "query { viewer { id } }"}


def test_sends_variables_when_given():
    t, session = _transport(FakeResponse(200, {"data": {}}))
    t.execute(None, "q", {"teamId": "t1"})
    assert session.calls[0].json["variables"] == {"teamId": "t1"}


@pytest.mark.parametrize(
    "status,payload,kind,message",
    [
        (401, {"errors": [{"message": "nope"}]}, ErrorKind.AUTH, "authentication failed - invalid API key"),
        (429, None, ErrorKind.RATE_LIMIT, "rate limit exceeded"),
        (500, {"errors": [{"message": "db down"}, {"message": "again"}]}, ErrorKind.API, "HTTP 500: db down; again"),
        (503, None, ErrorKind.API, "unexpected status code: 503"),
        (400, {"foo": 1}, ErrorKind.API, "unexpected status code: 400"),
    ],
)
def test_status_mapping(status, payload, kind, message):
    t, _ = _transport(FakeResponse(status, payload))
    with pytest.raises(LinearError) as exc_info:
        t.execute(None, "q")
    err = exc_info.value
    assert err.kind is kind
    assert err.code == status
    assert err.message == message


def test_graphql_errors_on_200():
    t, _ = _transport(FakeResponse(200, {"data": None, "errors": [{"message": "a"}, {"message": "b"}]}))
    with pytest.raises(LinearError) as exc_info:
        t.execute(None, "q")
    assert exc_info.value.kind is ErrorKind.API
    assert exc_info.value.code == 200
    assert exc_info.value.message == "GraphQL errors: a; b"
    assert not exc_info.value.retryable


def test_unparseable_body_on_200():
    t, _ = _transport(FakeResponse(200, None, raw=b"<html>"))
    with pytest.raises(LinearError) as exc_info:
        t.execute(None, "q")
    assert exc_info.value.kind is ErrorKind.API
    assert exc_info.value.code == 200
    assert exc_info.value.message.startswith("failed to parse response")


def test_network_failure_is_retryable():
    t, _ = _transport(requests.ConnectionError("refused"))
    with pytest.raises(LinearError) as exc_info:
        t.execute(None, "q")
    assert exc_info.value.kind is ErrorKind.NETWORK
    assert exc_info.value.code == 0
    assert exc_info.value.retryable


def test_null_data_becomes_empty_dict():
    t, _ = _transport(FakeResponse(200, {"data": None}))
    assert t.execute(None, "q") == {}


class RecordingSink(DiagnosticSink):
    def __init__(self):
        self.requests = []

    def log_request(self, method, url, variables):
        self.requests.append((method, url, variables))


def test_sink_sees_request_without_query_text():
    sink = RecordingSink()
    t, _ = _transport(FakeResponse(200, {"data": {}}), sink=sink)
    t.execute(None, "query Secret { x }", {"first": 5})
    assert sink.requests == [("POST", LINEAR_GRAPHQL_URL, {"first": 5})]
