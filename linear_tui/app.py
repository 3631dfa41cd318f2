"""Full-screen Linear dashboard.

Hotkeys:
- tab / shift+tab: cycle focus (menu, list, detail); esc: back to the list
- j/k, arrows: move selection (list) or scroll (detail)
- enter on the menu: switch between Issues and Projects
- c: create issue; e: edit selected issue
- r: refresh; ctrl+d: show/hide detail pane
- ?: help; q / ctrl+c: quit
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

from prompt_toolkit.application import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import (
    ConditionalContainer,
    DynamicContainer,
    Float,
    FloatContainer,
    HSplit,
    VSplit,
    Window,
)
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.styles import Style

from .config import Theme
from .messages import (
    DataLoadFailed,
    FetchData,
    FetchIssue,
    IssueSaved,
    KeyPressed,
    Quit,
    SaveIssue,
    SingleIssueRefreshed,
    WindowResized,
    data_loaded,
)
from .orchestrator import Orchestrator
from .service import LinearService
from . import views

logger = logging.getLogger("linear_tui.app")

KEY_NAMES: Dict[str, str] = {
    Keys.Up: 'up',
    Keys.Down: 'down',
    Keys.Left: 'left',
    Keys.Right: 'right',
    Keys.PageUp: 'pgup',
    Keys.PageDown: 'pgdown',
    Keys.Home: 'home',
    Keys.End: 'end',
    Keys.Enter: 'enter',
    Keys.ControlJ: 'enter',
    Keys.Tab: 'tab',
    Keys.BackTab: 'shift+tab',
    Keys.Escape: 'esc',
    Keys.Backspace: 'backspace',
    Keys.ControlC: 'ctrl+c',
    Keys.ControlD: 'ctrl+d',
    Keys.ControlS: 'ctrl+s',
}


def key_name(key: object, data: str) -> Optional[str]:
    """Normalize a prompt_toolkit key press to the names the widgets understand."""
    if key in KEY_NAMES:
        return KEY_NAMES[key]
    if data == ' ':
        return 'space'
    if len(data) == 1 and data.isprintable():
        return data
    return None


class EffectRunner:
    """Runs effects against the service. Blocking; call from a worker thread.

    Every failure becomes a result message; the orchestrator decides how to
    surface it.
    """

    def __init__(self, service_factory: Callable[[], LinearService], service: Optional[LinearService] = None):
        self.service_factory = service_factory
        self.service = service

    def _ensure_service(self) -> LinearService:
        if self.service is None:
            self.service = self.service_factory()
        return self.service

    def run(self, effect: object) -> Optional[object]:
        if isinstance(effect, FetchData):
            try:
                svc = self._ensure_service()
                if svc.initialized and svc.is_stale():
                    svc.refresh_data()
                issues, projects = svc.load_dashboard()
            except Exception as e:
                logger.exception("Dashboard load failed: %s", e)
                return DataLoadFailed(e)
            return data_loaded(issues, projects, [u.name for u in svc.get_users()])
        if isinstance(effect, FetchIssue):
            try:
                issue = self._ensure_service().get_issue(effect.issue_id)
            except Exception as e:
                return SingleIssueRefreshed(error=e)
            return SingleIssueRefreshed(issue=issue)
        if isinstance(effect, SaveIssue):
            created = not effect.issue_id
            try:
                svc = self._ensure_service()
                if created:
                    issue = svc.create_issue(effect.title, effect.description, effect.priority, effect.assignee)
                else:
                    issue = svc.update_issue(
                        effect.issue_id,
                        title=effect.title,
                        description=effect.description,
                        priority=effect.priority,
                        assignee_name=effect.assignee,
                        status_name=effect.status,
                    )
            except Exception as e:
                logger.exception("Saving issue failed: %s", e)
                return IssueSaved(created=created, error=e, request_id=effect.request_id)
            return IssueSaved(issue=issue, created=created, request_id=effect.request_id)
        logger.debug("No runner for effect %r", effect)
        return None


def _modal_window(text_fn, width: int, height: int) -> Window:
    return Window(
        width=width,
        height=Dimension(preferred=height, max=height + 10),
        content=FormattedTextControl(text=text_fn),
        wrap_lines=True,
        always_hide_cursor=True,
        style='class:modal',
    )


class Dashboard:
    """Glue between the orchestrator and prompt_toolkit.

    Messages are handled on the event loop one at a time; effects run in the
    default executor and post their result message back to the loop.
    """

    def __init__(self, orch: Orchestrator, runner: EffectRunner, theme: Optional[Theme] = None):
        self.orch = orch
        self.runner = runner
        self.app = Application(
            layout=Layout(self._build_root()),
            key_bindings=self._build_bindings(),
            style=Style.from_dict(views.theme_style(theme or Theme())),
            full_screen=True,
            mouse_support=False,
            before_render=self._sync_size,
        )

    # -----------------------------
    # Message loop
    # -----------------------------
    def dispatch(self, msg: object) -> None:
        self.handle(self.orch.update(msg))
        self.app.invalidate()

    def handle(self, effects: list) -> None:
        for eff in effects:
            if isinstance(eff, Quit):
                if self.app.is_running:
                    self.app.exit()
                return
            self.app.create_background_task(self._run_effect(eff))

    async def _run_effect(self, eff: object) -> None:
        loop = asyncio.get_running_loop()
        msg = await loop.run_in_executor(None, self.runner.run, eff)
        if msg is not None:
            self.dispatch(msg)

    def _sync_size(self, app: Application) -> None:
        size = app.output.get_size()
        if (size.columns, size.rows) != (self.orch.width, self.orch.height):
            self.orch.update(WindowResized(size.columns, size.rows))

    # -----------------------------
    # Layout / keys
    # -----------------------------
    def _build_root(self) -> FloatContainer:
        orch = self.orch
        menu_window = Window(height=1, content=FormattedTextControl(text=lambda: views.build_menu(orch)))
        list_window = Window(content=FormattedTextControl(text=lambda: views.build_list(orch)), wrap_lines=False)
        detail_window = Window(content=FormattedTextControl(text=lambda: views.build_detail(orch)), wrap_lines=True)
        status_window = Window(height=1, content=FormattedTextControl(text=lambda: views.build_status_bar(orch)))
        too_small_window = Window(content=FormattedTextControl(text=lambda: views.build_too_small(orch)))
        split = VSplit([list_window, Window(width=1, char='│'), detail_window])

        def body():
            if orch.too_small:
                return too_small_window
            return split if orch.detail.visible else list_window

        floats = [
            Float(content=ConditionalContainer(
                _modal_window(lambda: views.build_help(orch), 56, 14),
                filter=Condition(lambda: orch.help.visible and not orch.modal_visible),
            )),
            Float(content=ConditionalContainer(
                _modal_window(lambda: views.build_form(orch), 64, 14),
                filter=Condition(lambda: orch.form.visible and not orch.error_modal.visible),
            )),
            Float(content=ConditionalContainer(
                _modal_window(lambda: views.build_error_modal(orch), 64, 10),
                filter=Condition(lambda: orch.error_modal.visible),
            )),
        ]
        return FloatContainer(content=HSplit([menu_window, DynamicContainer(body), status_window]), floats=floats)

    def _build_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        def on_key(event) -> None:
            for press in event.key_sequence:
                name = key_name(press.key, press.data)
                if name is not None:
                    self.dispatch(KeyPressed(name))

        for k in KEY_NAMES:
            kb.add(k)(on_key)
        kb.add(Keys.Any)(on_key)
        return kb

    def run(self) -> None:
        self.app.run(pre_run=lambda: self.handle(self.orch.init()))


def run_ui(orch: Orchestrator, runner: EffectRunner, theme: Optional[Theme] = None) -> None:
    Dashboard(orch, runner, theme).run()
