import pytest

from medpanel.layout.resizable import PaneLayout, PanelResizer, PointerEvents


def test_drag_moves_width_by_container_percentage():
    resizer = PanelResizer(40, 20, 60)
    resizer.begin_drag(500, 1000)

    assert resizer.drag_to(600)
    assert resizer.width == pytest.approx(50)


def test_drag_is_clamped_to_bounds():
    resizer = PanelResizer(40, 20, 50)
    resizer.begin_drag(500, 1000)

    resizer.drag_to(900)
    assert resizer.width == 50

    resizer.drag_to(0)
    assert resizer.width == 20


def test_width_is_computed_from_drag_start():
    resizer = PanelResizer(40, 20, 60)
    resizer.begin_drag(500, 1000)
    for x in (520, 540, 560, 580, 600):
        resizer.drag_to(x)

    assert resizer.width == pytest.approx(50)


def test_changes_within_threshold_are_ignored():
    changes = []
    resizer = PanelResizer(40, 20, 60, on_change=changes.append)
    resizer.begin_drag(500, 1000)

    assert not resizer.drag_to(500.5)
    assert resizer.width == 40
    assert changes == []

    assert resizer.drag_to(502)
    assert changes == [pytest.approx(40.2)]


def test_left_edge_divider_grows_when_dragged_left():
    resizer = PanelResizer(35, 20, 50, direction=-1)
    resizer.begin_drag(600, 1000)

    resizer.drag_to(500)
    assert resizer.width == pytest.approx(45)


def test_moves_without_drag_do_nothing():
    resizer = PanelResizer(40, 20, 60)

    assert not resizer.drag_to(900)
    assert resizer.width == 40


def test_zero_width_container_does_not_start_drag():
    events = PointerEvents()
    resizer = PanelResizer(40, 20, 60, events=events)
    resizer.begin_drag(100, 0)

    assert not resizer.dragging
    assert events.listener_count() == 0


def test_release_removes_listeners():
    events = PointerEvents()
    resizer = PanelResizer(30, 20, 50, events=events)
    resizer.begin_drag(300, 1000)
    assert events.listener_count("move") == 1
    assert events.listener_count("up") == 1

    events.dispatch("move", 400)
    events.dispatch("up")

    assert resizer.width == pytest.approx(40)
    assert not resizer.dragging
    assert events.listener_count() == 0

    events.dispatch("move", 900)
    assert resizer.width == pytest.approx(40)


def test_close_during_drag_removes_listeners():
    events = PointerEvents()
    resizer = PanelResizer(30, 20, 50, events=events)
    resizer.begin_drag(300, 1000)

    resizer.close()

    assert events.listener_count() == 0
    assert not resizer.dragging


def test_set_width_clamps_and_notifies():
    changes = []
    resizer = PanelResizer(30, 20, 50, on_change=changes.append)

    assert resizer.set_width(75) == 50
    assert changes == [50]


def test_initial_width_is_clamped():
    assert PanelResizer(5, 20, 50).width == 20


def test_invalid_bounds():
    with pytest.raises(ValueError):
        PanelResizer(30, 60, 20)


def test_pane_layout_defaults_and_middle():
    layout = PaneLayout()

    assert layout.widths() == {"left": 30.0, "middle": 35.0, "right": 35.0}


def test_pane_layout_dividers_share_events():
    layout = PaneLayout()
    layout.left.begin_drag(300, 1000)
    layout.events.dispatch("move", 400)
    layout.events.dispatch("up")

    layout.right.begin_drag(650, 1000)
    layout.events.dispatch("move", 600)
    layout.events.dispatch("up")

    widths = layout.widths()
    assert widths["left"] == pytest.approx(40)
    assert widths["right"] == pytest.approx(40)
    assert widths["middle"] == pytest.approx(20)
    assert layout.events.listener_count() == 0


def test_pane_layout_restore_clamps():
    layout = PaneLayout()

    widths = layout.restore(10, 70)

    assert widths == {"left": 20.0, "middle": 30.0, "right": 50.0}
