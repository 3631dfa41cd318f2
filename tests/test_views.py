import pytest

from linear_tui import views
from linear_tui.config import Theme
from linear_tui.messages import DataLoadFailed, KeyPressed, WindowResized, data_loaded
from linear_tui.models import Issue, Project
from linear_tui.orchestrator import Orchestrator


def _text(frags):
    return "".join(text for _style, text in frags)


def _ready():
    orch = Orchestrator()
    orch.init()
    issues = [Issue(id=f"ENG-{i}", linear_id=f"u{i}", title=f"Issue number {i}", status="Todo",
                    priority="High", description="First line\nSecond line") for i in range(1, 4)]
    orch.update(data_loaded(issues, [Project(id="p1", name="Roadmap", status="started", progress=0.42)]))
    orch.update(WindowResized(100, 30))
    return orch


@pytest.mark.parametrize("value,expected", [("205", "#ff5faf"), ("0", "#000000"), ("255", "#eeeeee"), ("#123456", "#123456"), ("x", None), ("300", None)])
def test_xterm_hex(value, expected):
    assert views.xterm_hex(value) == expected


def test_theme_style_uses_theme_colors():
    style = views.theme_style(Theme())
    assert "#ff5faf" in style["list.row.selected"]
    assert set(views.BASE_STYLE) <= set(style)


def test_list_marks_selected_row():
    orch = _ready()
    frags = views.build_list(orch)
    selected = [text for style, text in frags if style == "class:list.row.selected"]
    assert len(selected) == 1
    assert selected[0].startswith("ENG-1")
    assert "Issue number 2" in _text(frags)


def test_list_loading_and_empty_messages():
    orch = Orchestrator()
    orch.init()
    assert "Loading" in _text(views.build_list(orch))
    orch.update(data_loaded([], []))
    assert "Nothing to show." in _text(views.build_list(orch))


def test_projects_view_shows_progress():
    orch = _ready()
    for key in ("shift+tab", "j", "enter"):
        orch.update(KeyPressed(key))
    assert "42%" in _text(views.build_list(orch))
    assert "Roadmap" in _text(views.build_detail(orch))


def test_detail_shows_issue_fields_and_scrolls():
    orch = _ready()
    text = _text(views.build_detail(orch))
    assert "ENG-1" in text
    assert "Second line" in text
    orch.detail.scroll = 3
    assert "ENG-1  Issue number 1" not in _text(views.build_detail(orch))


def test_detail_hidden_renders_nothing():
    orch = _ready()
    orch.update(KeyPressed("ctrl+d"))
    assert views.build_detail(orch) == []
    assert views.list_width(orch) == 100


def test_error_modal_fragments():
    orch = Orchestrator()
    orch.init()
    orch.update(DataLoadFailed(RuntimeError("connection refused")))
    text = _text(views.build_error_modal(orch))
    assert "connection refused" in text
    assert "Retry" in text and "Quit" in text


def test_form_fragments():
    orch = _ready()
    orch.update(KeyPressed("c"))
    text = _text(views.build_form(orch))
    assert "Create Issue" in text
    assert "< Medium >" in text
    assert "[ Submit ]" in text


def test_too_small_notice():
    orch = _ready()
    orch.update(WindowResized(60, 20))
    assert orch.too_small
    text = _text(views.build_too_small(orch))
    assert "Terminal too small" in text
    assert "60x20" in text


def test_status_bar_fits_width():
    orch = _ready()
    frags = views.build_status_bar(orch)
    assert "READY" in _text(frags)
    assert views._display_width(_text(frags)) == 100


def test_truncate_keeps_display_width():
    assert views._truncate("abcdef", 4) == "abc…"
    assert views._pad("漢字漢字", 5) == "漢字…"
    assert views._display_width(views._pad("漢字漢字", 5)) == 5


def test_detail_scroll_is_limited_to_content():
    orch = _ready()
    orch.update(KeyPressed("tab"))
    views.build_detail(orch)
    for _ in range(5):
        orch.update(KeyPressed("pgdown"))
    last = orch.detail.scroll
    assert last == orch.detail.max_scroll
    assert "Second line" in _text(views.build_detail(orch))
    orch.update(KeyPressed("up"))
    assert orch.detail.scroll == last - 1
