from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, List, Optional

PRIORITY_NUMBERS: Dict[str, int] = {
    "None": 0,
    "Urgent": 1,
    "High": 2,
    "Normal": 3,
    "Medium": 3,
    "Low": 4,
}

PRIORITY_LABELS: Dict[int, str] = {
    0: "None",
    1: "Urgent",
    2: "High",
    3: "Normal",
    4: "Low",
}

UNASSIGNED = "Unassigned"


def priority_to_number(label: Optional[str]) -> int:
    """Map a human priority label to Linear's numeric scale (unknown -> 0)."""
    return PRIORITY_NUMBERS.get((label or "").strip(), 0)


def priority_label(number: Optional[int]) -> str:
    if number is None:
        return "None"
    return PRIORITY_LABELS.get(number, "Unknown")


@dataclass
class Issue:
    id: str               # display identifier, e.g. "ENG-35"
    linear_id: str        # internal ID used by mutations
    title: str
    description: str = ""
    status: str = ""
    priority: str = "None"
    assignee: str = UNASSIGNED
    created_at: Optional[dt.datetime] = None


@dataclass
class Project:
    id: str
    name: str
    description: str = ""
    status: str = ""
    progress: float = 0.0
    created_at: Optional[dt.date] = None


@dataclass
class Team:
    id: str
    name: str
    key: str = ""
    description: str = ""


@dataclass
class User:
    id: str
    name: str
    email: str = ""
    avatar_url: str = ""


@dataclass
class IssueState:
    id: str
    name: str
    type: str = ""
    color: str = ""


@dataclass
class Comment:
    id: str
    body: str
    user: Optional[User] = None
    created_at: Optional[dt.datetime] = None


@dataclass
class IssueInput:
    """Mutation payload. Empty fields are left out of the request."""
    title: str = ""
    description: str = ""
    team_id: str = ""
    priority: int = 0
    assignee_id: str = ""
    project_id: str = ""
    state_id: str = ""

    def to_variables(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        if self.title:
            out["title"] = self.title
        if self.team_id:
            out["teamId"] = self.team_id
        if self.description:
            out["description"] = self.description
        if self.priority > 0:
            out["priority"] = self.priority
        if self.assignee_id:
            out["assigneeId"] = self.assignee_id
        if self.project_id:
            out["projectId"] = self.project_id
        if self.state_id:
            out["stateId"] = self.state_id
        return out


def parse_timestamp(raw: Optional[str]) -> Optional[dt.datetime]:
    if not raw:
        return None
    try:
        return dt.datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_project_date(raw: Optional[str]) -> Optional[dt.date]:
    """Project start dates come as 'YYYY-MM-DD'; anything else -> None."""
    if not raw:
        return None
    try:
        return dt.date.fromisoformat(str(raw).strip())
    except ValueError:
        return None


def _s(node: Dict[str, object], key: str) -> str:
    val = node.get(key)
    return "" if val is None else str(val)


def user_from_node(node: Dict[str, object]) -> User:
    return User(id=_s(node, "id"), name=_s(node, "name"), email=_s(node, "email"), avatar_url=_s(node, "avatarUrl"))


def team_from_node(node: Dict[str, object]) -> Team:
    return Team(id=_s(node, "id"), name=_s(node, "name"), key=_s(node, "key"), description=_s(node, "description"))


def state_from_node(node: Dict[str, object]) -> IssueState:
    return IssueState(id=_s(node, "id"), name=_s(node, "name"), type=_s(node, "type"), color=_s(node, "color"))


def issue_from_node(node: Dict[str, object]) -> Issue:
    state = node.get("state") or {}
    assignee = node.get("assignee") or {}
    raw_priority = node.get("priority")
    try:
        prio_num = int(raw_priority) if raw_priority is not None else 0
    except (TypeError, ValueError):
        prio_num = -1
    return Issue(
        id=_s(node, "identifier") or _s(node, "id"),
        linear_id=_s(node, "id"),
        title=_s(node, "title"),
        description=_s(node, "description"),
        status=_s(state, "name") if isinstance(state, dict) else "",
        priority=priority_label(prio_num),
        assignee=(_s(assignee, "name") if isinstance(assignee, dict) else "") or UNASSIGNED,
        created_at=parse_timestamp(node.get("createdAt")),
    )


def project_from_node(node: Dict[str, object]) -> Project:
    try:
        progress = float(node.get("progress") or 0.0)
    except (TypeError, ValueError):
        progress = 0.0
    progress = max(0.0, min(1.0, progress))
    return Project(
        id=_s(node, "id"),
        name=_s(node, "name"),
        description=_s(node, "description"),
        status=_s(node, "state"),
        progress=progress,
        created_at=parse_project_date(node.get("startDate")),
    )


def comment_from_node(node: Dict[str, object]) -> Comment:
    user = node.get("user")
    return Comment(
        id=_s(node, "id"),
        body=_s(node, "body"),
        user=user_from_node(user) if isinstance(user, dict) else None,
        created_at=parse_timestamp(node.get("createdAt")),
    )


def nodes(data: Dict[str, object], *path: str) -> List[Dict[str, object]]:
    """Walk ``data[path...]['nodes']`` tolerating nulls; drop non-dict nodes."""
    cur: object = data
    for key in path:
        if not isinstance(cur, dict):
            return []
        cur = cur.get(key) or {}
    if not isinstance(cur, dict):
        return []
    raw = cur.get("nodes") or []
    return [n for n in raw if isinstance(n, dict)]
