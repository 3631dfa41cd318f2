import pytest

from conftest import FakeResponse, FakeSession, issue_node
from linear_tui.api import LinearClient
from linear_tui.context import CallContext
from linear_tui.errors import ErrorKind, LinearError
from linear_tui.models import IssueInput
from linear_tui.ratelimit import RateLimiter
from linear_tui.retry import RetryConfig, RetryExecutor
from linear_tui.transport import GraphQLTransport


def _client(*responses):
    session = FakeSession(responses)
    transport = GraphQLTransport("key", session=session)
    executor = RetryExecutor(limiter=RateLimiter(), config=RetryConfig(base_delay=0.0, max_delay=0.0))
    return LinearClient(transport, executor), session


def _ok(data):
    return FakeResponse(200, {"data": data})


def test_validate_api_key_returns_viewer():
    client, _ = _client(_ok({"viewer": {"id": "u1", "name": "Ada", "email": "ada@example.com"}}))
    user = client.validate_api_key(CallContext())
    assert (user.id, user.name) == ("u1", "Ada")


def test_validate_api_key_without_viewer_is_auth_error():
    client, _ = _client(_ok({"viewer": None}))
    with pytest.raises(LinearError) as exc_info:
        client.validate_api_key(CallContext())
    assert exc_info.value.kind is ErrorKind.AUTH


def test_get_issues_sends_team_and_limit():
    client, session = _client(_ok({"issues": {"nodes": [issue_node(1), issue_node(2)]}}))
    issues = client.get_issues(CallContext(), "team-1", 50)
    assert [i.id for i in issues] == ["ENG-1", "ENG-2"]
    assert session.calls[0].json["variables"] == {"teamId": "team-1", "first": 50}


def test_get_issue_missing_is_404():
    client, _ = _client(_ok({"issue": None}))
    with pytest.raises(LinearError) as exc_info:
        client.get_issue(CallContext(), "ENG-404")
    assert exc_info.value.code == 404
    assert not exc_info.value.retryable


def test_retries_server_errors_through_executor():
    client, session = _client(FakeResponse(502), _ok({"teams": {"nodes": [{"id": "t1", "name": "Eng", "key": "ENG"}]}}))
    teams = client.get_teams(CallContext())
    assert [t.key for t in teams] == ["ENG"]
    assert len(session.calls) == 2


def test_create_issue_unsuccessful_payload():
    client, _ = _client(_ok({"issueCreate": {"success": False, "issue": None}}))
    with pytest.raises(LinearError) as exc_info:
        client.create_issue(CallContext(), IssueInput(title="x", team_id="t1"))
    assert exc_info.value.kind is ErrorKind.API
    assert exc_info.value.code == 200
    assert exc_info.value.message == "failed to create issue"


def test_update_issue_sends_id_and_input():
    client, session = _client(_ok({"issueUpdate": {"success": True, "issue": issue_node(3)}}))
    issue = client.update_issue(CallContext(), "uuid-3", IssueInput(title="New", state_id="s2"))
    assert issue.linear_id == "uuid-3"
    assert session.calls[0].json["variables"] == {"id": "uuid-3", "input": {"title": "New", "stateId": "s2"}}


def test_get_issue_states_reads_team_states():
    client, _ = _client(_ok({"team": {"states": {"nodes": [{"id": "s1", "name": "Todo", "type": "unstarted"}]}}}))
    states = client.get_issue_states(CallContext(), "t1")
    assert [(s.id, s.name) for s in states] == [("s1", "Todo")]


def test_create_comment():
    client, session = _client(_ok({"commentCreate": {"success": True, "comment": {"id": "c1", "body": "hi", "user": {"id": "u1", "name": "Ada"}}}}))
    comment = client.create_comment(CallContext(), "uuid-1", "hi")
    assert comment.body == "hi"
    assert comment.user.name == "Ada"
    assert session.calls[0].json["variables"] == {"input": {"issueId": "uuid-1", "body": "hi"}}
