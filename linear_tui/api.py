from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .context import CallContext
from .diagnostics import DiagnosticSink, NullSink
from .errors import ErrorKind, LinearError
from .models import (
    Comment,
    Issue,
    IssueInput,
    IssueState,
    Project,
    Team,
    User,
    comment_from_node,
    issue_from_node,
    nodes,
    project_from_node,
    state_from_node,
    team_from_node,
    user_from_node,
)
from .retry import RetryExecutor
from .transport import GraphQLTransport

logger = logging.getLogger("linear_tui.api")

# -----------------------------
# GraphQL documents
# -----------------------------
ISSUE_FIELDS = """
  id
  identifier
  title
  description
  priority
  createdAt
  updatedAt
  state { id name type color }
  assignee { id name email avatarUrl }
  team { id name key }
  project { id name }
"""

GQL_VIEWER = """
query ValidateAPIKey {
  viewer { id name email }
}
"""

GQL_ISSUES = """
query GetIssues($teamId: ID!, $first: Int!) {
  issues(filter: { team: { id: { eq: $teamId } } }, first: $first) {
    nodes {%s}
    pageInfo { hasNextPage endCursor }
  }
}
""" % ISSUE_FIELDS

GQL_ISSUE = """
query GetIssue($id: String!) {
  issue(id: $id) {%s}
}
""" % ISSUE_FIELDS

GQL_PROJECTS = """
query GetProjects {
  projects {
    nodes { id name description state progress startDate targetDate }
    pageInfo { hasNextPage endCursor }
  }
}
"""

GQL_TEAMS = """
query GetTeams {
  teams {
    nodes { id name description key }
  }
}
"""

GQL_USERS = """
query GetUsers {
  users {
    nodes { id name email avatarUrl }
  }
}
"""

GQL_ISSUE_STATES = """
query GetIssueStates($teamId: String!) {
  team(id: $teamId) {
    states { nodes { id name type color } }
  }
}
"""

GQL_MUTATION_CREATE_ISSUE = """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue {%s}
  }
}
""" % ISSUE_FIELDS

GQL_MUTATION_UPDATE_ISSUE = """
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) {
    success
    issue {%s}
  }
}
""" % ISSUE_FIELDS

GQL_MUTATION_CREATE_COMMENT = """
mutation CreateComment($input: CommentCreateInput!) {
  commentCreate(input: $input) {
    success
    comment {
      id
      body
      createdAt
      user { id name email avatarUrl }
    }
  }
}
"""


def _payload(data: Dict[str, object], key: str, what: str) -> Dict[str, object]:
    block = data.get(key) or {}
    if not isinstance(block, dict) or not block.get("success"):
        raise LinearError(ErrorKind.API, f"failed to {what}", 200)
    return block


class LinearClient:
    """Remote operations. Every call goes through the retry executor."""

    def __init__(self, transport: GraphQLTransport, executor: Optional[RetryExecutor] = None, sink: Optional[DiagnosticSink] = None):
        self.transport = transport
        self.sink = sink or transport.sink or NullSink()
        self.executor = executor or RetryExecutor(sink=self.sink)

    def _run(self, ctx: CallContext, query: str, variables: Optional[Dict[str, object]] = None) -> Dict[str, object]:
        return self.executor.execute(ctx, lambda: self.transport.execute(ctx, query, variables))

    def validate_api_key(self, ctx: CallContext) -> User:
        self.sink.log_info("Starting API key validation")
        data = self._run(ctx, GQL_VIEWER)
        viewer = data.get("viewer") or {}
        if not isinstance(viewer, dict) or not viewer.get("id"):
            raise LinearError(ErrorKind.AUTH, "API key validation returned no viewer", 200)
        user = user_from_node(viewer)
        self.sink.log_info("API key validated for user: %s (%s) [ID: %s]", user.name, user.email, user.id)
        return user

    def get_issues(self, ctx: CallContext, team_id: str, limit: int) -> List[Issue]:
        self.sink.log_info("Fetching issues for team %s (limit: %d)", team_id, limit)
        data = self._run(ctx, GQL_ISSUES, {"teamId": team_id, "first": limit})
        out = [issue_from_node(n) for n in nodes(data, "issues")]
        logger.info("Fetched %d issues for team %s", len(out), team_id)
        return out

    def get_issue(self, ctx: CallContext, issue_id: str) -> Issue:
        data = self._run(ctx, GQL_ISSUE, {"id": issue_id})
        node = data.get("issue")
        if not isinstance(node, dict):
            raise LinearError(ErrorKind.API, f"issue {issue_id} not found", 404)
        return issue_from_node(node)

    def get_projects(self, ctx: CallContext) -> List[Project]:
        data = self._run(ctx, GQL_PROJECTS)
        out = [project_from_node(n) for n in nodes(data, "projects")]
        logger.info("Fetched %d projects", len(out))
        return out

    def get_teams(self, ctx: CallContext) -> List[Team]:
        data = self._run(ctx, GQL_TEAMS)
        return [team_from_node(n) for n in nodes(data, "teams")]

    def get_users(self, ctx: CallContext) -> List[User]:
        data = self._run(ctx, GQL_USERS)
        return [user_from_node(n) for n in nodes(data, "users")]

    def get_issue_states(self, ctx: CallContext, team_id: str) -> List[IssueState]:
        data = self._run(ctx, GQL_ISSUE_STATES, {"teamId": team_id})
        return [state_from_node(n) for n in nodes(data, "team", "states")]

    def create_issue(self, ctx: CallContext, payload: IssueInput) -> Issue:
        data = self._run(ctx, GQL_MUTATION_CREATE_ISSUE, {"input": payload.to_variables()})
        block = _payload(data, "issueCreate", "create issue")
        return issue_from_node(block.get("issue") or {})

    def update_issue(self, ctx: CallContext, issue_id: str, payload: IssueInput) -> Issue:
        data = self._run(ctx, GQL_MUTATION_UPDATE_ISSUE, {"id": issue_id, "input": payload.to_variables()})
        block = _payload(data, "issueUpdate", "update issue")
        return issue_from_node(block.get("issue") or {})

    def create_comment(self, ctx: CallContext, issue_id: str, body: str) -> Comment:
        data = self._run(ctx, GQL_MUTATION_CREATE_COMMENT, {"input": {"issueId": issue_id, "body": body}})
        block = _payload(data, "commentCreate", "create comment")
        return comment_from_node(block.get("comment") or {})
