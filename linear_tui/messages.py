"""Messages consumed by the orchestrator and effects it asks the runner to perform."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .models import Issue, Project


# -----------------------------
# Messages (inbound)
# -----------------------------
@dataclass(frozen=True)
class LoadRequested:
    pass


@dataclass(frozen=True)
class DataLoaded:
    issues: Tuple[Issue, ...] = ()
    projects: Tuple[Project, ...] = ()
    assignees: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DataLoadFailed:
    error: BaseException


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class WindowResized:
    width: int
    height: int


@dataclass(frozen=True)
class RefreshSingleIssue:
    issue_id: str


@dataclass(frozen=True)
class SingleIssueRefreshed:
    issue: Optional[Issue] = None
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class IssueSaved:
    issue: Optional[Issue] = None
    created: bool = False
    error: Optional[BaseException] = None
    request_id: int = 0


# -----------------------------
# Effects (outbound)
# -----------------------------
@dataclass(frozen=True)
class FetchData:
    pass


@dataclass(frozen=True)
class FetchIssue:
    issue_id: str


@dataclass(frozen=True)
class SaveIssue:
    """Create when ``issue_id`` is empty, otherwise update that issue."""
    issue_id: str = ""
    title: str = ""
    description: str = ""
    priority: str = ""
    assignee: str = ""
    status: str = ""
    request_id: int = 0


@dataclass(frozen=True)
class Quit:
    pass


def data_loaded(issues: List[Issue], projects: List[Project], assignees: Optional[List[str]] = None) -> DataLoaded:
    return DataLoaded(tuple(issues), tuple(projects), tuple(assignees or ()))


__all__ = [
    'LoadRequested', 'DataLoaded', 'DataLoadFailed', 'KeyPressed', 'WindowResized',
    'RefreshSingleIssue', 'SingleIssueRefreshed', 'IssueSaved',
    'FetchData', 'FetchIssue', 'SaveIssue', 'Quit', 'data_loaded',
]
