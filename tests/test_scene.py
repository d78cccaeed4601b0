"""Scene builder tests."""

from datetime import date

import pytest

from wallpaper_editor.canvas.store import EditorStore
from wallpaper_editor.models.editor_models import SetImageSizeAction
from wallpaper_editor.models.item_models import CalendarItem
from wallpaper_editor.render.scene import (
    FillCommand,
    GroupCommand,
    ImageCommand,
    SceneView,
    SelectionBoxCommand,
    TextCommand,
    build_scene,
    calendar_size,
)

OCTOBER_2025 = date(2025, 10, 1)


@pytest.fixture
def store():
    store = EditorStore()
    store.dispatch(SetImageSizeAction(width=800, height=600))
    return store


def _day_colors(group: GroupCommand):
    colors = {}
    for child in group.children:
        if isinstance(child, TextCommand) and child.lines[0].isdigit():
            colors[int(child.lines[0])] = child.color
    return colors


def test_empty_scene_is_background_only(store):
    scene = build_scene(store.state)
    assert (scene.width, scene.height) == (800, 600)
    assert [type(c) for c in scene.commands] == [FillCommand, ImageCommand]
    assert not scene.has_selection()


def test_selected_item_gets_selection_box(store):
    item_id = store.add_text()
    scene = build_scene(store.state)
    boxes = [c for c in scene.commands if isinstance(c, SelectionBoxCommand)]
    assert len(boxes) == 1
    assert boxes[0].item_id == item_id

    store.select(None)
    assert not build_scene(store.state).has_selection()


def test_selected_item_is_painted_last(store):
    text_id = store.add_text()
    store.add_calendar(OCTOBER_2025)
    store.select(text_id)

    commands = build_scene(store.state).commands
    assert isinstance(commands[2], GroupCommand)
    assert isinstance(commands[3], TextCommand)
    assert isinstance(commands[4], SelectionBoxCommand)


def test_text_lines_split_on_newlines(store):
    store.add_text("content")
    text = next(c for c in build_scene(store.state).commands if isinstance(c, TextCommand))
    assert text.lines == ["내용을 입력하세요", "여러 줄을 입력할 수 있습니다."]
    assert text.bold is False
    # position + 2px border + 8px padding
    assert (text.x, text.y) == (60, 60)


def test_calendar_group_contents(store):
    item_id = store.add_calendar(OCTOBER_2025)
    group = next(c for c in build_scene(store.state).commands if isinstance(c, GroupCommand))
    # background + header + 7 weekday labels + 31 days
    assert len(group.children) == 40
    assert group.children[1].lines == ["2025년 10월"]

    store.update_calendar(item_id, {"show_weekdays": False})
    group = next(c for c in build_scene(store.state).commands if isinstance(c, GroupCommand))
    assert len(group.children) == 33


def test_calendar_size_default():
    width, _ = calendar_size(CalendarItem.create(OCTOBER_2025))
    assert width == 16 * 2 + 40 * 7 + 4 * 6


def test_calendar_day_colors(store):
    item_id = store.add_calendar(OCTOBER_2025)
    store.update_calendar(item_id, {
        "holiday_color": "#00ff00",
        "sunday_color": "#ff0000",
        "saturday_color": "#0000ff",
        "day_color": "#eeeeee",
    })
    group = next(c for c in build_scene(store.state).commands if isinstance(c, GroupCommand))
    colors = _day_colors(group)

    assert colors[3] == "#00ff00"   # 개천절, Friday
    assert colors[5] == "#00ff00"   # 추석, Sunday
    assert colors[12] == "#ff0000"  # Sunday
    assert colors[11] == "#0000ff"  # Saturday
    assert colors[14] == "#eeeeee"  # Tuesday


def test_calendar_without_holidays(store):
    item_id = store.add_calendar(OCTOBER_2025)
    store.update_calendar(item_id, {"show_holidays": False, "holiday_color": "#00ff00", "day_color": "#eeeeee"})
    group = next(c for c in build_scene(store.state).commands if isinstance(c, GroupCommand))
    colors = _day_colors(group)
    assert colors[3] == "#eeeeee"
    assert colors[5] == store.get_item(item_id).sunday_color


def test_calendar_opacity_on_group(store):
    item_id = store.add_calendar(OCTOBER_2025)
    store.update_calendar(item_id, {"opacity": 0.4})
    group = next(c for c in build_scene(store.state).commands if isinstance(c, GroupCommand))
    assert group.opacity == 0.4


def test_scene_view_rebuilds_on_every_change(store):
    view = SceneView(store, (800, 600))
    assert view.renders == 0

    item_id = store.add_text()
    assert view.renders == 1
    assert view.scene.has_selection()

    store.select(None)
    assert view.renders == 2
    assert not view.scene.has_selection()

    view.close()
    store.delete_item(item_id)
    assert view.renders == 2


def test_free_text_has_shadow_but_calendar_text_does_not(store):
    store.add_text()
    store.add_calendar(OCTOBER_2025)
    commands = build_scene(store.state).commands

    text = next(c for c in commands if isinstance(c, TextCommand))
    assert text.shadow_color == "#000000"
    assert text.shadow_alpha == 0.5
    assert text.shadow_blur == 1.0

    group = next(c for c in commands if isinstance(c, GroupCommand))
    assert all(child.shadow_color is None for child in group.children if isinstance(child, TextCommand))
