"""Formatted-text fragments for each widget: lists of (style, text) tuples."""
from __future__ import annotations

import unicodedata
from typing import Dict, List, Optional, Tuple

from prompt_toolkit.utils import get_cwidth

from .config import Theme
from .models import Issue, Project
from .orchestrator import AppState, FocusedPane, MIN_HEIGHT, MIN_WIDTH, Orchestrator
from .widgets import VIEW_ISSUES, HelpOverlay, IssueFormModal

Fragments = List[Tuple[str, str]]

BASE_STYLE: Dict[str, str] = {
    'menu': '',
    'menu.item': '#d0d0d0',
    'menu.item.selected': 'bold reverse',
    'pane.title': 'bold',
    'pane.title.focused': 'bold underline',
    'list.header': 'bold',
    'list.row': '',
    'list.row.selected': 'reverse',
    'detail.label': 'bold',
    'detail.text': '',
    'status': 'reverse',
    'modal': 'bg:#1c1c1c #f0f0f0',
    'modal.title': 'bold',
    'modal.button': '#d0d0d0',
    'modal.button.selected': 'bold reverse',
    'modal.message': '#ffd787',
    'form.field': '#d7d7d7',
    'form.field.cursor': 'bold #ffffff bg:#444444',
    'warning': 'bold #ff8787',
}

_CUBE = (0, 95, 135, 175, 215, 255)
_SYSTEM = (
    (0, 0, 0), (128, 0, 0), (0, 128, 0), (128, 128, 0),
    (0, 0, 128), (128, 0, 128), (0, 128, 128), (192, 192, 192),
    (128, 128, 128), (255, 0, 0), (0, 255, 0), (255, 255, 0),
    (0, 0, 255), (255, 0, 255), (0, 255, 255), (255, 255, 255),
)


def xterm_hex(value: str) -> Optional[str]:
    """'205' -> '#ff5faf'; hex strings pass through; anything else -> None."""
    value = (value or "").strip()
    if value.startswith('#'):
        return value
    try:
        n = int(value)
    except ValueError:
        return None
    if not 0 <= n <= 255:
        return None
    if n < 16:
        r, g, b = _SYSTEM[n]
    elif n < 232:
        n -= 16
        r, g, b = _CUBE[n // 36], _CUBE[(n // 6) % 6], _CUBE[n % 6]
    else:
        r = g = b = 8 + (n - 232) * 10
    return f"#{r:02x}{g:02x}{b:02x}"


def theme_style(theme: Theme) -> Dict[str, str]:
    style = dict(BASE_STYLE)
    primary = xterm_hex(theme.primary_color)
    secondary = xterm_hex(theme.secondary_color)
    background = xterm_hex(theme.background_color)
    text = xterm_hex(theme.text_color)
    if primary:
        style['menu.item.selected'] = f'bold {text or "#ffffff"} bg:{primary}'
        style['pane.title.focused'] = f'bold underline {primary}'
        style['list.row.selected'] = f'bold bg:{primary} {text or "#ffffff"}'
        style['modal.button.selected'] = f'bold bg:{primary} #ffffff'
    if secondary:
        style['list.header'] = f'bold {secondary}'
        style['detail.label'] = f'bold {secondary}'
        style['modal.title'] = f'bold {secondary}'
    if background and text:
        style['modal'] = f'bg:{background} {text}'
        style['status'] = f'bg:{background} {text}'
    return style


# -----------------------------
# Text helpers
# -----------------------------
def _char_width(ch: str) -> int:
    if unicodedata.combining(ch) or unicodedata.category(ch) == "Cf":
        return 0
    fallback = 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    width = get_cwidth(ch)
    return width if width > 0 else fallback


def _display_width(text: str) -> int:
    return sum(_char_width(ch) for ch in text)


def _sanitize(s: Optional[str]) -> str:
    return (s or "").replace("\n", " ").replace("\r", " ")


def _truncate(s: str, maxlen: int) -> str:
    """Truncate to a display width, keeping whole glyphs and adding an ellipsis."""
    s = _sanitize(s)
    if maxlen <= 0:
        return ""
    if _display_width(s) <= maxlen:
        return s
    out: List[str] = []
    width = 0
    for ch in s:
        w = _char_width(ch)
        if width + w + 1 > maxlen:
            break
        out.append(ch)
        width += w
    return "".join(out) + "…"


def _pad(text: Optional[str], width: int) -> str:
    raw = _truncate(_sanitize(text), width)
    return raw + " " * max(0, width - _display_width(raw))


def _wrap(text: str, width: int) -> List[str]:
    lines: List[str] = []
    for para in (text or "").splitlines() or [""]:
        line = ""
        for word in para.split(" "):
            cand = f"{line} {word}" if line else word
            if _display_width(cand) <= width:
                line = cand
                continue
            if line:
                lines.append(line)
            while _display_width(word) > width:
                lines.append(word[:width])
                word = word[width:]
            line = word
        lines.append(line)
    return lines


def _progress_bar(progress: float, width: int = 20) -> str:
    filled = int(round(max(0.0, min(1.0, progress)) * width))
    return "█" * filled + "░" * (width - filled)


# -----------------------------
# Panes
# -----------------------------
def list_width(orch: Orchestrator) -> int:
    return orch.width // 2 if orch.detail.visible else orch.width


def build_menu(orch: Orchestrator) -> Fragments:
    frags: Fragments = [('class:menu', ' ')]
    focused = orch.focused is FocusedPane.MENU
    for idx, (_key, label) in enumerate(orch.menu.ITEMS):
        selected = idx == orch.menu.cursor
        style = 'class:menu.item.selected' if selected and focused else 'class:menu.item'
        active = orch.list.view_type == _key
        frags.append((style, f" {'●' if active else ' '} {label} "))
        frags.append(('class:menu', ' '))
    frags.append(('class:menu', " Linear"))
    return frags


def _issue_columns(width: int) -> Tuple[int, int, int, int]:
    id_w, status_w, prio_w = 9, 12, 8
    title_w = max(10, width - id_w - status_w - prio_w - 4)
    return id_w, title_w, status_w, prio_w


def _issue_row(issue: Issue, width: int) -> str:
    id_w, title_w, status_w, prio_w = _issue_columns(width)
    return " ".join([
        _pad(issue.id, id_w),
        _pad(issue.title, title_w),
        _pad(issue.status or '-', status_w),
        _pad(issue.priority or '-', prio_w),
    ])


def _project_columns(width: int) -> Tuple[int, int, int]:
    status_w, pct_w = 12, 5
    return max(10, width - status_w - pct_w - 2), status_w, pct_w


def _project_row(project: Project, width: int) -> str:
    name_w, status_w, pct_w = _project_columns(width)
    return " ".join([
        _pad(project.name, name_w),
        _pad(project.status or '-', status_w),
        _pad(f"{int(project.progress * 100)}%", pct_w),
    ])


def build_list(orch: Orchestrator, width: Optional[int] = None, height: Optional[int] = None) -> Fragments:
    width = width or list_width(orch)
    height = height or max(1, orch.height - 4)
    lst = orch.list
    is_issues = lst.view_type == VIEW_ISSUES
    title_style = 'class:pane.title.focused' if orch.focused is FocusedPane.LIST else 'class:pane.title'
    frags: Fragments = [(title_style, "Issues" if is_issues else "Projects"), ('', "\n")]

    rows = lst.rows()
    if not rows:
        if orch.state in (AppState.LOADING, AppState.RETRYING):
            frags.append(('', "Loading…"))
        else:
            frags.append(('', "Nothing to show."))
        return frags

    if is_issues:
        id_w, title_w, status_w, prio_w = _issue_columns(width)
        header = " ".join([_pad("ID", id_w), _pad("Title", title_w), _pad("Status", status_w), _pad("Priority", prio_w)])
    else:
        name_w, status_w, pct_w = _project_columns(width)
        header = " ".join([_pad("Name", name_w), _pad("Status", status_w), _pad("Done", pct_w)])
    frags.append(('class:list.header', header))

    visible = max(1, height - 2)
    if lst.cursor < lst.offset:
        lst.offset = lst.cursor
    elif lst.cursor >= lst.offset + visible:
        lst.offset = lst.cursor - visible + 1
    for idx in range(lst.offset, min(len(rows), lst.offset + visible)):
        row = rows[idx]
        text = _issue_row(row, width) if is_issues else _project_row(row, width)
        style = 'class:list.row.selected' if idx == lst.cursor else 'class:list.row'
        frags.append(('', "\n"))
        frags.append((style, text))
    return frags


def _detail_lines(item: object, width: int) -> List[Tuple[str, str]]:
    lines: List[Tuple[str, str]] = []

    def field(label: str, value: str) -> None:
        lines.append(('class:detail.label', f"{label:<10}"))
        lines.append(('class:detail.text', f"{value}\n"))

    if isinstance(item, Issue):
        lines.append(('class:pane.title', f"{item.id}  {item.title}\n\n"))
        field("Status", item.status or '-')
        field("Priority", item.priority or '-')
        field("Assignee", item.assignee or '-')
        field("Created", item.created_at.strftime("%Y-%m-%d %H:%M") if item.created_at else '-')
        lines.append(('', "\n"))
        for line in _wrap(item.description or "No description", width):
            lines.append(('class:detail.text', line + "\n"))
    elif isinstance(item, Project):
        lines.append(('class:pane.title', f"{item.name}\n\n"))
        field("Status", item.status or '-')
        field("Progress", f"{_progress_bar(item.progress)} {int(item.progress * 100)}%")
        field("Started", item.created_at.isoformat() if item.created_at else '-')
        lines.append(('', "\n"))
        for line in _wrap(item.description or "No description", width):
            lines.append(('class:detail.text', line + "\n"))
    return lines


def build_detail(orch: Orchestrator, width: Optional[int] = None) -> Fragments:
    if not orch.detail.visible:
        return []
    width = width or max(10, orch.width - list_width(orch) - 2)
    title_style = 'class:pane.title.focused' if orch.focused is FocusedPane.DETAIL else 'class:pane.title'
    frags: Fragments = [(title_style, "Detail"), ('', "\n")]
    item = orch.detail.item
    if item is None:
        frags.append(('', "No selection"))
        return frags
    lines = _detail_lines(item, width)
    # scroll counts rendered lines
    rendered = sum(1 for _style, text in lines if text.endswith("\n"))
    orch.detail.max_scroll = max(0, rendered - 1)
    orch.detail.scroll_to(orch.detail.scroll)
    skip = orch.detail.scroll
    for style, text in lines:
        if skip > 0 and text.endswith("\n"):
            skip -= 1
            continue
        if skip > 0:
            continue
        frags.append((style, text))
    return frags


def build_status_bar(orch: Orchestrator) -> Fragments:
    labels = {
        AppState.LOADING: "LOADING",
        AppState.READY: "READY",
        AppState.ERROR: "ERROR",
        AppState.RETRYING: "RETRYING",
    }
    text = f" {labels[orch.state]}  [{orch.focused.value}]"
    if orch.status_line:
        text += "  " + orch.status_line
    text += "   ? help  q quit"
    return [('class:status', _pad(text, orch.width))]


# -----------------------------
# Overlays
# -----------------------------
def build_error_modal(orch: Orchestrator) -> Fragments:
    modal = orch.error_modal
    if not modal.visible:
        return []
    frags: Fragments = [('class:modal.title', modal.title or "Error"), ('class:modal', "\n\n")]
    for line in _wrap(modal.message, 56):
        frags.append(('class:modal.message', line + "\n"))
    frags.append(('class:modal', "\n"))
    for idx, (_action, label) in enumerate(modal.ACTIONS):
        style = 'class:modal.button.selected' if idx == modal.cursor else 'class:modal.button'
        frags.append((style, f"  {label}  "))
        frags.append(('class:modal', "   "))
    frags.append(('class:modal', "\n\n←/→ choose  Enter confirm  r retry  q quit"))
    return frags


def build_form(orch: Orchestrator) -> Fragments:
    form = orch.form
    if not form.visible:
        return []
    frags: Fragments = [('class:modal.title', "Edit Issue" if form.editing else "Create Issue"), ('class:modal', "\n\n")]
    for idx, name in enumerate(IssueFormModal.FIELDS):
        style = 'class:form.field.cursor' if idx == form.focus else 'class:form.field'
        if name == 'submit':
            frags.append(('class:modal', "\n"))
            frags.append((style, "[ Saving… ]" if form.submitting else "[ Submit ]"))
            frags.append(('class:modal', "\n"))
            continue
        label = f"{IssueFormModal.LABELS[name]:<12}"
        if name in IssueFormModal.CHOICE_FIELDS:
            value = f"< {form.value(name)} >"
        elif name == 'description':
            value = form.value(name).replace("\n", "⏎") or ""
        else:
            value = form.value(name)
        cursor = "▏" if idx == form.focus and name in IssueFormModal.TEXT_FIELDS else ""
        frags.append(('class:modal', label))
        frags.append((style, _truncate(value, 44) + cursor))
        frags.append(('class:modal', "\n"))
    if form.message:
        frags.append(('class:modal.message', "\n" + form.message + "\n"))
    frags.append(('class:modal', "\nTab next field  ↑/↓ change  Ctrl+S save  Esc cancel"))
    return frags


def build_help(orch: Orchestrator) -> Fragments:
    if not orch.help.visible:
        return []
    frags: Fragments = [('class:modal.title', "Keys"), ('class:modal', "\n\n")]
    for keys, desc in HelpOverlay.LINES:
        frags.append(('class:detail.label', f"{keys:<18}"))
        frags.append(('class:modal', desc + "\n"))
    return frags


def build_too_small(orch: Orchestrator) -> Fragments:
    return [
        ('class:warning', "Terminal too small"),
        ('', f"\nNeed at least {MIN_WIDTH}x{MIN_HEIGHT}, have {orch.width}x{orch.height}."),
    ]
