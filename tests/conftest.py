import os
import sys
from types import SimpleNamespace

import pytest

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)


class FakeClock:
    """Manually advanced clock usable for both time.time and time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code=200, payload=None, raw=None):
        self.status_code = status_code
        self._payload = payload
        if raw is None:
            import json
            raw = json.dumps(payload).encode('utf-8') if payload is not None else b""
        self.content = raw

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records posts and replays queued responses (or raises queued exceptions)."""

    def __init__(self, responses=None):
        self.headers = {}
        self.responses = list(responses or [])
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append(SimpleNamespace(url=url, json=json, timeout=timeout))
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def issue_node(n: int, status: str = "Todo", assignee: str = "Ada") -> dict:
    return {
        'id': f'uuid-{n}',
        'identifier': f'ENG-{n}',
        'title': f'Issue {n}',
        'description': f'Description {n}',
        'priority': 2,
        'createdAt': '2024-03-01T10:00:00.000Z',
        'state': {'id': 'state-todo', 'name': status, 'type': 'unstarted', 'color': '#aaa'},
        'assignee': {'id': 'user-1', 'name': assignee, 'email': 'ada@example.com'} if assignee else None,
    }


def project_node(n: int, progress: float = 0.5) -> dict:
    return {
        'id': f'proj-{n}',
        'name': f'Project {n}',
        'description': '',
        'state': 'started',
        'progress': progress,
        'startDate': '2024-01-15',
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_session():
    return FakeSession()
