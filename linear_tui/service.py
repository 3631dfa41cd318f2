from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Tuple

from .api import LinearClient
from .context import DEFAULT_TIMEOUT, CallContext
from .diagnostics import DiagnosticSink, NullSink
from .errors import LinearError, validation_error
from .models import (
    UNASSIGNED,
    Comment,
    Issue,
    IssueInput,
    IssueState,
    Project,
    Team,
    User,
    priority_to_number,
)
from .retry import RetryExecutor
from .transport import GraphQLTransport

ISSUE_PAGE_SIZE = 50
STALE_AFTER_SECONDS = 5 * 60

logger = logging.getLogger("linear_tui.service")


class LinearService:
    """Domain operations on top of the Linear client.

    Owns the team/user cache and the staleness clock. Construction does no
    network I/O; call ``initialize`` before any other operation.
    """

    def __init__(
        self,
        api_key: str,
        client: Optional[LinearClient] = None,
        sink: Optional[DiagnosticSink] = None,
        clock: Callable[[], float] = time.time,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not api_key:
            raise validation_error("linear API key not configured")
        self.sink = sink or NullSink()
        if client is None:
            transport = GraphQLTransport(api_key, sink=self.sink)
            client = LinearClient(transport, RetryExecutor(sink=self.sink), sink=self.sink)
        self.client = client
        self.timeout = timeout
        self._clock = clock
        self.teams: List[Team] = []
        self.users: List[User] = []
        self.default_team: Optional[Team] = None
        self.viewer: Optional[User] = None
        self.last_fetch: Optional[float] = None
        self.initialized = False

    def _ctx(self) -> CallContext:
        return CallContext(timeout=self.timeout)

    def _require_team(self) -> Team:
        if self.default_team is None:
            raise validation_error("no default team available - please check your Linear workspace access")
        return self.default_team

    # -----------------------------
    # Bootstrap / cache
    # -----------------------------
    def initialize(self) -> None:
        ctx = self._ctx()
        try:
            viewer = self.client.validate_api_key(ctx)
        except LinearError as e:
            raise e.with_context("API key validation failed") from e
        try:
            teams = self.client.get_teams(ctx)
        except LinearError as e:
            raise e.with_context("failed to fetch teams") from e
        try:
            users = self.client.get_users(ctx)
        except LinearError as e:
            raise e.with_context("failed to fetch users") from e
        # Commit only once every step succeeded.
        self.viewer = viewer
        self.teams = teams
        self.default_team = teams[0] if teams else None
        self.users = users
        self.last_fetch = self._clock()
        self.initialized = True
        logger.info(
            "Service initialized: %d teams, %d users, default team %s",
            len(teams), len(users), self.default_team.name if self.default_team else "-",
        )

    def refresh_data(self) -> None:
        self.initialize()

    def is_stale(self) -> bool:
        if self.last_fetch is None:
            return True
        return self._clock() - self.last_fetch > STALE_AFTER_SECONDS

    def get_teams(self) -> List[Team]:
        return list(self.teams)

    def get_users(self) -> List[User]:
        return list(self.users)

    def get_default_team(self) -> Optional[Team]:
        return self.default_team

    def set_default_team(self, team_id: str) -> None:
        for team in self.teams:
            if team.id == team_id:
                self.default_team = team
                return
        raise validation_error(f"team with ID {team_id} not found")

    def resolve_assignee(self, name: Optional[str]) -> str:
        """First exact display-name match wins; blank/Unassigned -> ''."""
        name = (name or "").strip()
        if not name or name == UNASSIGNED:
            return ""
        for user in self.users:
            if user.name == name:
                return user.id
        return ""

    # -----------------------------
    # Reads
    # -----------------------------
    def get_issues(self) -> List[Issue]:
        team = self._require_team()
        try:
            return self.client.get_issues(self._ctx(), team.id, ISSUE_PAGE_SIZE)
        except LinearError as e:
            raise e.with_context("failed to load issues") from e

    def get_issue(self, issue_id: str) -> Issue:
        try:
            return self.client.get_issue(self._ctx(), issue_id)
        except LinearError as e:
            raise e.with_context("failed to load issue") from e

    def get_projects(self) -> List[Project]:
        self._require_team()
        try:
            return self.client.get_projects(self._ctx())
        except LinearError as e:
            raise e.with_context("failed to load projects") from e

    def get_issue_states(self) -> List[IssueState]:
        team = self._require_team()
        try:
            return self.client.get_issue_states(self._ctx(), team.id)
        except LinearError as e:
            raise e.with_context("failed to fetch issue states") from e

    # -----------------------------
    # Mutations
    # -----------------------------
    def create_issue(self, title: str, description: str = "", priority: str = "", assignee_name: str = "") -> Issue:
        team = self._require_team()
        title = (title or "").strip()
        if not title:
            raise validation_error("title is required")
        payload = IssueInput(
            title=title,
            description=(description or "").strip(),
            team_id=team.id,
            priority=priority_to_number(priority),
            assignee_id=self.resolve_assignee(assignee_name),
        )
        try:
            issue = self.client.create_issue(self._ctx(), payload)
        except LinearError as e:
            raise e.with_context("failed to create issue") from e
        logger.info("Created issue %s", issue.id)
        return issue

    def update_issue(
        self,
        issue_id: str,
        title: str = "",
        description: str = "",
        priority: str = "",
        assignee_name: str = "",
        status_name: str = "",
    ) -> Issue:
        self._require_team()
        if not issue_id:
            raise validation_error("issue ID is required")
        payload = IssueInput(
            title=(title or "").strip(),
            description=(description or "").strip(),
            priority=priority_to_number(priority) if priority else 0,
            assignee_id=self.resolve_assignee(assignee_name),
        )
        if status_name:
            for state in self.get_issue_states():
                if state.name == status_name:
                    payload.state_id = state.id
                    break
        try:
            issue = self.client.update_issue(self._ctx(), issue_id, payload)
        except LinearError as e:
            raise e.with_context("failed to update issue") from e
        logger.info("Updated issue %s", issue.id)
        return issue

    def create_comment(self, issue_id: str, body: str) -> Comment:
        body = (body or "").strip()
        if not body:
            raise validation_error("comment body is required")
        try:
            return self.client.create_comment(self._ctx(), issue_id, body)
        except LinearError as e:
            raise e.with_context("failed to create comment") from e

    def load_dashboard(self) -> Tuple[List[Issue], List[Project]]:
        """Bootstrap if needed, then fetch issues and projects together."""
        if not self.initialized:
            self.initialize()
        return self.get_issues(), self.get_projects()
