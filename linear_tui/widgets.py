"""Widget state for the dashboard. No rendering and no prompt_toolkit here.

Keys arrive as normalized names: single printable characters, plus
'up', 'down', 'left', 'right', 'pgup', 'pgdown', 'home', 'end', 'enter',
'space', 'tab', 'shift+tab', 'esc', 'backspace', 'ctrl+c', 'ctrl+d', 'ctrl+s'.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from .models import UNASSIGNED, Issue, Project

VIEW_ISSUES = 'issues'
VIEW_PROJECTS = 'projects'

DEFAULT_STATUSES = ["Backlog", "Todo", "In Progress", "Done", "Canceled"]
FORM_PRIORITIES = ["None", "Urgent", "High", "Medium", "Low"]
DEFAULT_FORM_PRIORITY = "Medium"

UP_KEYS = ('up', 'k')
DOWN_KEYS = ('down', 'j')


class MenuBar:
    ITEMS: Tuple[Tuple[str, str], ...] = ((VIEW_ISSUES, "Issues"), (VIEW_PROJECTS, "Projects"))

    def __init__(self):
        self.cursor = 0

    @property
    def selected_key(self) -> str:
        return self.ITEMS[self.cursor][0]

    def handle_key(self, key: str) -> None:
        if key in UP_KEYS or key in ('left', 'h'):
            self.cursor = (self.cursor - 1) % len(self.ITEMS)
        elif key in DOWN_KEYS or key in ('right', 'l'):
            self.cursor = (self.cursor + 1) % len(self.ITEMS)


class ItemList:
    """Primary list: issues or projects, one cursor, clamped."""

    def __init__(self):
        self.view_type = VIEW_ISSUES
        self.issues: List[Issue] = []
        self.projects: List[Project] = []
        self.cursor = 0
        self.offset = 0

    def rows(self) -> Sequence[Union[Issue, Project]]:
        return self.issues if self.view_type == VIEW_ISSUES else self.projects

    def _clamp(self) -> None:
        n = len(self.rows())
        self.cursor = max(0, min(self.cursor, n - 1)) if n else 0
        if self.cursor < self.offset:
            self.offset = self.cursor

    def set_data(self, issues: Sequence[Issue], projects: Sequence[Project]) -> None:
        self.issues = list(issues)
        self.projects = list(projects)
        self._clamp()

    def set_view_type(self, view_type: str) -> None:
        if view_type not in (VIEW_ISSUES, VIEW_PROJECTS):
            raise ValueError(f"unknown view type: {view_type}")
        if view_type != self.view_type:
            self.view_type = view_type
            self.cursor = 0
            self.offset = 0

    def move(self, delta: int) -> None:
        self.cursor += delta
        self._clamp()

    def handle_key(self, key: str) -> None:
        if key in UP_KEYS:
            self.move(-1)
        elif key in DOWN_KEYS:
            self.move(1)
        elif key == 'pgup':
            self.move(-10)
        elif key == 'pgdown':
            self.move(10)
        elif key in ('home', 'g'):
            self.cursor = 0
            self._clamp()
        elif key in ('end', 'G'):
            self.cursor = len(self.rows()) - 1
            self._clamp()

    def selected(self) -> Optional[Union[Issue, Project]]:
        rows = self.rows()
        if not rows:
            return None
        return rows[self.cursor]

    def selected_issue(self) -> Optional[Issue]:
        if self.view_type != VIEW_ISSUES or not self.issues:
            return None
        return self.issues[self.cursor]

    def selected_project(self) -> Optional[Project]:
        if self.view_type != VIEW_PROJECTS or not self.projects:
            return None
        return self.projects[self.cursor]

    def update_single_issue(self, issue: Issue) -> bool:
        for i, cur in enumerate(self.issues):
            if cur.linear_id == issue.linear_id:
                self.issues[i] = issue
                return True
        return False

    def prepend_issue(self, issue: Issue) -> None:
        if not self.update_single_issue(issue):
            self.issues.insert(0, issue)
            if self.view_type == VIEW_ISSUES:
                self.cursor = 0
        self._clamp()


class DetailPane:
    def __init__(self):
        self.visible = True
        self.item: Optional[Union[Issue, Project]] = None
        self.scroll = 0
        # last scrollable line, known once the pane has been rendered
        self.max_scroll: Optional[int] = None

    def show(self, item: Optional[Union[Issue, Project]]) -> None:
        prev = self.item
        if item is None or prev is None or type(item) is not type(prev) or item.id != prev.id:
            self.scroll = 0
            self.max_scroll = None
        self.item = item

    def toggle(self) -> None:
        self.visible = not self.visible

    def scroll_to(self, value: int) -> None:
        if self.max_scroll is not None:
            value = min(value, self.max_scroll)
        self.scroll = max(0, value)

    def handle_key(self, key: str) -> None:
        if key in UP_KEYS:
            self.scroll_to(self.scroll - 1)
        elif key in DOWN_KEYS:
            self.scroll_to(self.scroll + 1)
        elif key == 'pgup':
            self.scroll_to(self.scroll - 10)
        elif key in ('pgdown', 'space'):
            self.scroll_to(self.scroll + 10)
        elif key in ('home', 'g'):
            self.scroll_to(0)


class ErrorModal:
    RETRY = 'retry'
    QUIT = 'quit'
    ACTIONS: Tuple[Tuple[str, str], ...] = ((RETRY, "Retry"), (QUIT, "Quit"))

    def __init__(self):
        self.visible = False
        self.title = ""
        self.message = ""
        self.cursor = 0

    def show(self, title: str, message: str) -> None:
        self.visible = True
        self.title = title
        self.message = message
        self.cursor = 0

    def hide(self) -> None:
        self.visible = False

    def handle_key(self, key: str) -> Optional[str]:
        """Return the chosen action, or None while the user is still choosing."""
        if key in ('left', 'h', 'shift+tab'):
            self.cursor = (self.cursor - 1) % len(self.ACTIONS)
        elif key in ('right', 'l', 'tab'):
            self.cursor = (self.cursor + 1) % len(self.ACTIONS)
        elif key in ('enter', 'space'):
            return self.ACTIONS[self.cursor][0]
        elif key == 'r':
            return self.RETRY
        elif key in ('q', 'ctrl+c'):
            return self.QUIT
        return None


class IssueFormModal:
    """Create/edit form. Field focus is independent from the pane focus."""

    FIELDS = ('title', 'description', 'status', 'priority', 'assignee', 'submit')
    LABELS = {
        'title': "Title",
        'description': "Description",
        'status': "Status",
        'priority': "Priority",
        'assignee': "Assignee",
        'submit': "Submit",
    }
    TEXT_FIELDS = ('title', 'description')
    CHOICE_FIELDS = ('status', 'priority', 'assignee')

    SUBMIT = 'submit'
    CLOSE = 'close'
    QUIT = 'quit'

    def __init__(self):
        self.visible = False
        self.issue_id = ""
        self.focus = 0
        self.values = {'title': "", 'description': ""}
        self.options = {'status': [], 'priority': list(FORM_PRIORITIES), 'assignee': [UNASSIGNED]}
        self.choice = {'status': 0, 'priority': 0, 'assignee': 0}
        self.message = ""
        self.submitting = False
        # bumped on every open; save results carry the id they were sent with
        self.request_id = 0

    @property
    def editing(self) -> bool:
        return bool(self.issue_id)

    @property
    def focused_field(self) -> str:
        return self.FIELDS[self.focus]

    def _open(self, statuses: Sequence[str], assignees: Sequence[str]) -> None:
        self.visible = True
        self.request_id += 1
        self.focus = 0
        self.message = ""
        self.submitting = False
        self.options['status'] = list(statuses) or list(DEFAULT_STATUSES)
        people = [a for a in assignees if a and a != UNASSIGNED]
        self.options['assignee'] = [UNASSIGNED] + people
        self.options['priority'] = list(FORM_PRIORITIES)

    def _select(self, field: str, value: str) -> None:
        opts = self.options[field]
        if value == "Normal" and field == 'priority':
            value = "Medium"
        if value not in opts:
            opts.append(value)
        self.choice[field] = opts.index(value)

    def open_create(self, statuses: Sequence[str], assignees: Sequence[str]) -> None:
        self._open(statuses, assignees)
        self.issue_id = ""
        self.values = {'title': "", 'description': ""}
        self.choice = {'status': 0, 'priority': 0, 'assignee': 0}
        self._select('priority', DEFAULT_FORM_PRIORITY)

    def open_edit(self, issue: Issue, statuses: Sequence[str], assignees: Sequence[str]) -> None:
        self._open(statuses, assignees)
        self.issue_id = issue.linear_id
        self.values = {'title': issue.title, 'description': issue.description}
        self.choice = {'status': 0, 'priority': 0, 'assignee': 0}
        if issue.status:
            self._select('status', issue.status)
        self._select('priority', issue.priority or "None")
        self._select('assignee', issue.assignee or UNASSIGNED)

    def hide(self) -> None:
        self.visible = False
        self.submitting = False

    def value(self, field: str) -> str:
        if field in self.TEXT_FIELDS:
            return self.values[field]
        opts = self.options[field]
        return opts[self.choice[field]] if opts else ""

    def handle_key(self, key: str) -> Optional[str]:
        """Apply a key; return SUBMIT, CLOSE or QUIT when the form wants out."""
        field = self.focused_field
        if key == 'esc':
            return self.CLOSE
        if key == 'ctrl+c':
            return self.QUIT
        if key == 'ctrl+s':
            return self.SUBMIT
        if key == 'tab':
            self.focus = (self.focus + 1) % len(self.FIELDS)
            return None
        if key == 'shift+tab':
            self.focus = (self.focus - 1) % len(self.FIELDS)
            return None
        if key == 'enter':
            if field == 'submit':
                return self.SUBMIT
            if field == 'description':
                self.values['description'] += "\n"
            else:
                self.focus = (self.focus + 1) % len(self.FIELDS)
            return None
        if field in self.CHOICE_FIELDS:
            opts = self.options[field]
            if opts and key in UP_KEYS:
                self.choice[field] = (self.choice[field] - 1) % len(opts)
            elif opts and key in DOWN_KEYS:
                self.choice[field] = (self.choice[field] + 1) % len(opts)
            return None
        if field in self.TEXT_FIELDS:
            if key == 'backspace':
                self.values[field] = self.values[field][:-1]
            elif key == 'space':
                self.values[field] += " "
            elif len(key) == 1 and key.isprintable():
                self.values[field] += key
        return None


class HelpOverlay:
    LINES = (
        ("tab / shift+tab", "Cycle focus: menu, list, detail"),
        ("esc", "Focus the list"),
        ("j / k, arrows", "Move selection or scroll"),
        ("enter", "Open the selected menu entry"),
        ("c", "Create issue"),
        ("e", "Edit selected issue"),
        ("r", "Refresh"),
        ("ctrl+d", "Show/hide detail pane"),
        ("?", "Toggle this help"),
        ("q / ctrl+c", "Quit"),
    )

    def __init__(self):
        self.visible = False

    def toggle(self) -> None:
        self.visible = not self.visible
