from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

import requests

from .context import DEFAULT_TIMEOUT, CallContext
from .diagnostics import DiagnosticSink, NullSink
from .errors import ErrorKind, LinearError

LINEAR_GRAPHQL_URL = "https://api.linear.app/graphql"

logger = logging.getLogger("linear_tui.transport")


def _session(api_key: str, s: Optional[requests.Session] = None) -> requests.Session:
    if s is None:
        s = requests.Session()
    # Linear expects the raw personal API key, no "Bearer" scheme.
    s.headers["Authorization"] = api_key
    s.headers["Content-Type"] = "application/json"
    return s


def _error_messages(payload: object) -> List[str]:
    if not isinstance(payload, dict):
        return []
    errs = payload.get("errors") or []
    if not isinstance(errs, list):
        return []
    out: List[str] = []
    for e in errs:
        if isinstance(e, dict):
            out.append(str(e.get("message") or e))
        else:
            out.append(str(e))
    return out


class GraphQLTransport:
    """One POST per call; maps HTTP status and GraphQL errors to LinearError."""

    def __init__(
        self,
        api_key: str,
        url: str = LINEAR_GRAPHQL_URL,
        session: Optional[requests.Session] = None,
        sink: Optional[DiagnosticSink] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.url = url
        self.session = _session(api_key, session)
        self.sink = sink or NullSink()
        self.timeout = timeout

    def _request_timeout(self, ctx: Optional[CallContext]) -> float:
        if ctx is None:
            return self.timeout
        rem = ctx.remaining()
        if rem is None:
            return self.timeout
        return max(0.001, min(self.timeout, rem))

    def execute(self, ctx: Optional[CallContext], query: str, variables: Optional[Dict[str, object]] = None) -> Dict[str, object]:
        body: Dict[str, object] = {"query": query}
        if variables:
            body["variables"] = variables
        self.sink.log_request("POST", self.url, variables)
        started = time.monotonic()
        try:
            resp = self.session.post(self.url, json=body, timeout=self._request_timeout(ctx))
        except requests.RequestException as e:
            self.sink.log_response(0, time.monotonic() - started, 0, e)
            logger.warning("GraphQL request failed: %s", e)
            raise LinearError(ErrorKind.NETWORK, f"network error: {e}", 0) from e
        duration = time.monotonic() - started
        raw = resp.content or b""
        self.sink.log_response(resp.status_code, duration, len(raw))

        status = resp.status_code
        if status == 401:
            raise LinearError(ErrorKind.AUTH, "authentication failed - invalid API key", 401)
        if status == 429:
            raise LinearError(ErrorKind.RATE_LIMIT, "rate limit exceeded", 429)
        if status != 200:
            try:
                messages = _error_messages(resp.json())
            except ValueError:
                messages = []
            if messages:
                msg = f"HTTP {status}: " + "; ".join(messages)
            else:
                msg = f"unexpected status code: {status}"
            raise LinearError(ErrorKind.API, msg, status)

        try:
            payload = resp.json()
        except ValueError as e:
            raise LinearError(ErrorKind.API, f"failed to parse response: {e}", 200) from e
        if not isinstance(payload, dict):
            raise LinearError(ErrorKind.API, "failed to parse response: not a JSON object", 200)
        messages = _error_messages(payload)
        if messages:
            raise LinearError(ErrorKind.API, "GraphQL errors: " + "; ".join(messages), 200)
        data = payload.get("data")
        return data if isinstance(data, dict) else {}
