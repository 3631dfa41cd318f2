from __future__ import annotations

import enum
import logging
from typing import Dict, List, Optional, Sequence

from .messages import (
    DataLoaded,
    DataLoadFailed,
    FetchData,
    FetchIssue,
    IssueSaved,
    KeyPressed,
    LoadRequested,
    Quit,
    RefreshSingleIssue,
    SaveIssue,
    SingleIssueRefreshed,
    WindowResized,
)
from .models import Issue
from .widgets import (
    DEFAULT_STATUSES,
    DetailPane,
    ErrorModal,
    HelpOverlay,
    IssueFormModal,
    ItemList,
    MenuBar,
)

logger = logging.getLogger("linear_tui.orchestrator")

MIN_WIDTH = 80
MIN_HEIGHT = 24

CREDENTIALS_MESSAGE = (
    "Linear API key not configured. Set LINEAR_API_KEY or add "
    "linear_api_key to the config file, then choose Retry."
)


class AppState(enum.Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    RETRYING = "retrying"


class FocusedPane(enum.Enum):
    MENU = "menu"
    LIST = "list"
    DETAIL = "detail"


FOCUS_ORDER = (FocusedPane.MENU, FocusedPane.LIST, FocusedPane.DETAIL)


class Orchestrator:
    """Dashboard state machine.

    ``update(message)`` mutates the model and returns the effects the runner
    should perform (network fetches, quit). It never does I/O itself.
    """

    def __init__(self, service_ready: bool = True, startup_error: Optional[BaseException] = None):
        self.menu = MenuBar()
        self.list = ItemList()
        self.detail = DetailPane()
        self.error_modal = ErrorModal()
        self.form = IssueFormModal()
        self.help = HelpOverlay()
        self.panes: Dict[FocusedPane, object] = {
            FocusedPane.MENU: self.menu,
            FocusedPane.LIST: self.list,
            FocusedPane.DETAIL: self.detail,
        }
        self.focused = FocusedPane.LIST
        self.assignees: List[str] = []
        self.last_error: Optional[BaseException] = None
        self.status_line = ""
        self.width = MIN_WIDTH
        self.height = MIN_HEIGHT
        self.loading = False
        self.pending_save: Optional[int] = None
        if service_ready and startup_error is None:
            self.state = AppState.LOADING
        else:
            self.state = AppState.ERROR
            self.last_error = startup_error
            self.error_modal.show("Configuration error", CREDENTIALS_MESSAGE)

    # -----------------------------
    # Queries
    # -----------------------------
    @property
    def too_small(self) -> bool:
        return self.width < MIN_WIDTH or self.height < MIN_HEIGHT

    @property
    def modal_visible(self) -> bool:
        return self.error_modal.visible or self.form.visible

    def get_selected_issue(self) -> Optional[Issue]:
        return self.list.selected_issue()

    def statuses(self) -> List[str]:
        seen: List[str] = []
        for issue in self.list.issues:
            if issue.status and issue.status not in seen:
                seen.append(issue.status)
        return seen or list(DEFAULT_STATUSES)

    # -----------------------------
    # Entry points
    # -----------------------------
    def init(self) -> list:
        if self.state is AppState.LOADING:
            return self._start_fetch()
        return []

    def update(self, msg: object) -> list:
        if isinstance(msg, KeyPressed):
            return self._on_key(msg.key)
        if isinstance(msg, LoadRequested):
            return self._on_load_requested()
        if isinstance(msg, DataLoaded):
            return self._on_data_loaded(msg)
        if isinstance(msg, DataLoadFailed):
            return self._on_load_failed(msg.error)
        if isinstance(msg, WindowResized):
            self.width, self.height = msg.width, msg.height
            return []
        if isinstance(msg, RefreshSingleIssue):
            return [FetchIssue(msg.issue_id)]
        if isinstance(msg, SingleIssueRefreshed):
            return self._on_issue_refreshed(msg)
        if isinstance(msg, IssueSaved):
            return self._on_issue_saved(msg)
        logger.debug("Ignoring unknown message %r", msg)
        return []

    # -----------------------------
    # Loading
    # -----------------------------
    def _start_fetch(self) -> list:
        if self.loading:
            return []
        self.loading = True
        return [FetchData()]

    def _on_load_requested(self) -> list:
        if self.state not in (AppState.LOADING, AppState.RETRYING, AppState.READY):
            return []
        self.state = AppState.LOADING
        return self._start_fetch()

    def _on_data_loaded(self, msg: DataLoaded) -> list:
        self.loading = False
        if self.state not in (AppState.LOADING, AppState.RETRYING):
            logger.debug("Dropping data loaded in state %s", self.state)
            return []
        self.list.set_data(msg.issues, msg.projects)
        if msg.assignees:
            self.assignees = list(msg.assignees)
        self.state = AppState.READY
        self.last_error = None
        self.status_line = f"Loaded {len(msg.issues)} issues, {len(msg.projects)} projects"
        self._sync_detail()
        return []

    def _on_load_failed(self, error: BaseException) -> list:
        self.loading = False
        if self.state not in (AppState.LOADING, AppState.RETRYING):
            return []
        logger.error("Load failed: %s", error)
        self.state = AppState.ERROR
        self.last_error = error
        self.error_modal.show("Failed to load data", str(error))
        return []

    def _retry(self) -> list:
        self.error_modal.hide()
        self.state = AppState.RETRYING
        self.status_line = "Retrying…"
        return self._start_fetch()

    # -----------------------------
    # Single issue refresh / save
    # -----------------------------
    def _on_issue_refreshed(self, msg: SingleIssueRefreshed) -> list:
        if msg.error is not None or msg.issue is None:
            logger.warning("Single issue refresh failed: %s", msg.error)
            return []
        if self.list.update_single_issue(msg.issue):
            selected = self.list.selected_issue()
            if selected is not None and selected.linear_id == msg.issue.linear_id:
                self.detail.show(selected)
        return []

    def _on_issue_saved(self, msg: IssueSaved) -> list:
        if msg.request_id == self.pending_save:
            self.pending_save = None
        form = self.form
        current = form.visible and form.request_id == msg.request_id
        if msg.error is not None or msg.issue is None:
            logger.warning("Issue save failed: %s", msg.error)
            if current:
                form.submitting = False
                form.message = str(msg.error) if msg.error else "Save failed"
            else:
                self.status_line = f"Save failed: {msg.error}"
            return []
        if current:
            form.hide()
        issue = msg.issue
        if msg.created:
            self.list.prepend_issue(issue)
            self.status_line = f"Created {issue.id}"
            self._sync_detail()
            return []
        self.list.update_single_issue(issue)
        self._sync_detail()
        self.status_line = f"Updated {issue.id}"
        return [FetchIssue(issue.linear_id)]

    def _submit_form(self) -> list:
        form = self.form
        if form.submitting:
            return []
        if self.pending_save is not None:
            form.message = "Previous save still running"
            return []
        title = form.value('title').strip()
        if not title:
            form.message = "Title is required"
            return []
        form.message = "Saving…"
        form.submitting = True
        self.pending_save = form.request_id
        return [SaveIssue(
            issue_id=form.issue_id,
            title=title,
            description=form.value('description'),
            priority=form.value('priority'),
            assignee=form.value('assignee'),
            status=form.value('status') if form.editing else "",
            request_id=form.request_id,
        )]

    # -----------------------------
    # Keys
    # -----------------------------
    def _on_key(self, key: str) -> list:
        # Visible modals own the keyboard.
        if self.error_modal.visible:
            action = self.error_modal.handle_key(key)
            if action == ErrorModal.RETRY:
                return self._retry()
            if action == ErrorModal.QUIT:
                return [Quit()]
            return []
        if self.form.visible:
            result = self.form.handle_key(key)
            if result == IssueFormModal.CLOSE:
                self.form.hide()
            elif result == IssueFormModal.QUIT:
                return [Quit()]
            elif result == IssueFormModal.SUBMIT:
                return self._submit_form()
            return []
        if self.help.visible:
            if key in ('?', 'esc', 'q'):
                self.help.visible = False
            elif key == 'ctrl+c':
                return [Quit()]
            return []

        if key in ('q', 'ctrl+c'):
            return [Quit()]
        if key == '?':
            self.help.toggle()
            return []
        if key == 'r':
            if self.state is AppState.READY:
                self.state = AppState.LOADING
                self.status_line = "Refreshing…"
                return self._start_fetch()
            return []
        if key == 'c':
            if self.state is AppState.READY:
                self.form.open_create(self.statuses(), self.assignees)
            return []
        if key == 'e':
            issue = self.get_selected_issue()
            if self.state is AppState.READY and issue is not None:
                self.form.open_edit(issue, self.statuses(), self.assignees)
            return []
        if key == 'ctrl+d':
            self.detail.toggle()
            if not self.detail.visible and self.focused is FocusedPane.DETAIL:
                self.focused = FocusedPane.LIST
            return []
        if key == 'tab':
            self._cycle_focus(1)
            return []
        if key == 'shift+tab':
            self._cycle_focus(-1)
            return []
        if key == 'esc':
            self.focused = FocusedPane.LIST
            return []
        if key == 'enter' and self.focused is FocusedPane.MENU:
            self.list.set_view_type(self.menu.selected_key)
            self.focused = FocusedPane.LIST
            self._sync_detail()
            return []

        self.panes[self.focused].handle_key(key)
        if self.focused is not FocusedPane.DETAIL:
            self._sync_detail()
        return []

    def _cycle_focus(self, step: int) -> None:
        order: Sequence[FocusedPane] = [p for p in FOCUS_ORDER if p is not FocusedPane.DETAIL or self.detail.visible]
        idx = order.index(self.focused) if self.focused in order else order.index(FocusedPane.LIST)
        self.focused = order[(idx + step) % len(order)]

    def _sync_detail(self) -> None:
        self.detail.show(self.list.selected())
