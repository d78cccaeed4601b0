"""
End-to-end editor API tests.
Covers: session lifecycle, items, drag, keys, zoom, export, calendar grid.
"""

import io
from urllib.parse import quote

from PIL import Image


def _url(editor, path=""):
    return f"/api/editor/{editor['session_id']}{path}"


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    health = client.get("/health").json()
    assert health["status"] == "healthy"


def test_api_info(client):
    info = client.get("/api/info").json()
    assert info["text_kinds"] == ["title", "content"]
    assert "Pretendard" in info["fonts"]
    assert info["ranges"]["cell_size"] == [30, 80]
    assert info["export_formats"] == ["png", "jpg"]


def test_open_session(editor):
    assert editor["state"]["texts"] == []
    assert editor["state"]["calendars"] == []
    assert editor["state"]["viewport"]["image_width"] == 40
    assert editor["state"]["viewport"]["image_height"] == 30
    assert editor["selected"] is None
    assert editor["panel"] == []


def test_open_session_fits_viewport(client):
    response = client.post("/api/editor/session", json={
        "url": "https://cdn.example.com/bg.png",
        "viewport_width": 164,
        "viewport_height": 124,
    })
    assert response.status_code == 200
    # min(100 / 40, 60 / 30) = 2.0
    assert response.json()["state"]["viewport"]["scale"] == 2.0


def test_open_session_load_failure(client):
    response = client.post("/api/editor/session", json={"url": "https://cdn.example.com/not-an-image.png"})
    assert response.status_code == 422
    assert response.json()["detail"] == "이미지를 불러올 수 없습니다."


def test_unknown_session(client):
    assert client.get("/api/editor/missing").status_code == 404
    assert client.post("/api/editor/missing/items/text", json={}).status_code == 404
    assert client.delete("/api/editor/missing").status_code == 404


def test_add_text_selects_it(client, editor):
    response = client.post(_url(editor, "/items/text"), json={"kind": "content"})
    body = response.json()

    assert response.status_code == 200
    assert body["selected"]["id"] == body["item_id"]
    assert body["selected"]["kind"] == "content"
    assert body["panel"][0]["control"] == "textarea"


def test_add_calendar_for_requested_month(client, editor):
    body = client.post(_url(editor, "/items/calendar"), json={"year": 2025, "month": 10}).json()
    calendar = body["state"]["calendars"][0]
    assert (calendar["year"], calendar["month"]) == (2025, 10)
    assert calendar["id"] == body["item_id"]


def test_update_item_clamps_values(client, editor):
    item_id = client.post(_url(editor, "/items/calendar"), json={}).json()["item_id"]

    body = client.patch(_url(editor, f"/items/{item_id}"), json={
        "values": {"cell_size": 62, "font_size": 99, "opacity": 0.5}
    }).json()

    calendar = body["selected"]
    assert body["changed"] is True
    assert calendar["cell_width"] == calendar["cell_height"] == 60
    assert calendar["font_size"] == 32
    assert calendar["opacity"] == 0.5


def test_update_item_rejects_bad_value(client, editor):
    item_id = client.post(_url(editor, "/items/text"), json={}).json()["item_id"]
    response = client.patch(_url(editor, f"/items/{item_id}"), json={"values": {"color": "blue"}})
    assert response.status_code == 422


def test_update_unknown_item_is_noop(client, editor):
    body = client.patch(_url(editor, "/items/missing"), json={"values": {"font_size": 40}}).json()
    assert body["changed"] is False


def test_drag_respects_zoom(client, editor):
    item_id = client.post(_url(editor, "/items/text"), json={}).json()["item_id"]
    client.post(_url(editor, "/zoom"), json={"action": "set", "scale": 2.0})

    client.post(_url(editor, f"/items/{item_id}/drag"), json={"phase": "start"})
    body = client.post(_url(editor, f"/items/{item_id}/drag"), json={"phase": "stop", "dx": 100, "dy": 40}).json()

    assert body["selected"]["position"] == {"x": 100.0, "y": 70.0}


def test_drag_unknown_item(client, editor):
    body = client.post(_url(editor, "/items/missing/drag"), json={"phase": "stop", "dx": 5}).json()
    assert body["changed"] is False


def test_zoom_actions(client, editor):
    assert client.post(_url(editor, "/zoom"), json={"action": "in"}).json()["state"]["viewport"]["scale"] == 1.1
    assert client.post(_url(editor, "/zoom"), json={"action": "reset"}).json()["state"]["viewport"]["scale"] == 1.0
    assert client.post(_url(editor, "/zoom"), json={"action": "set", "scale": 9}).json()["state"]["viewport"]["scale"] == 5.0
    assert client.post(_url(editor, "/zoom"), json={"action": "fit"}).status_code == 422


def test_select_and_background_click(client, editor):
    first = client.post(_url(editor, "/items/text"), json={}).json()["item_id"]
    client.post(_url(editor, "/items/text"), json={})

    assert client.post(_url(editor, "/select"), json={"id": first}).json()["state"]["selected_id"] == first
    assert client.post(_url(editor, "/select"), json={"id": None}).json()["state"]["selected_id"] is None


def test_delete_key_ignored_while_typing(client, editor):
    item_id = client.post(_url(editor, "/items/text"), json={}).json()["item_id"]

    body = client.post(_url(editor, "/keys"), json={"key": "Backspace", "focus": "input"}).json()
    assert body["changed"] is False
    assert len(body["state"]["texts"]) == 1

    body = client.post(_url(editor, "/keys"), json={"key": "Delete", "focus": "canvas"}).json()
    assert body["changed"] is True
    assert body["item_id"] == item_id
    assert body["state"]["texts"] == []


def test_delete_item(client, editor):
    item_id = client.post(_url(editor, "/items/calendar"), json={}).json()["item_id"]
    body = client.delete(_url(editor, f"/items/{item_id}")).json()
    assert body["state"]["calendars"] == []
    assert body["state"]["selected_id"] is None


def test_scene_and_panel(client, editor):
    client.post(_url(editor, "/items/calendar"), json={"year": 2025, "month": 10})

    scene = client.get(_url(editor, "/scene")).json()
    assert [c["op"] for c in scene["commands"]] == ["fill", "image", "group", "selection"]

    panel = client.get(_url(editor, "/panel")).json()
    assert "cell_size" in [f["name"] for f in panel]


def test_export_png(client, editor):
    client.post(_url(editor, "/items/text"), json={})
    response = client.post(_url(editor, "/export"))

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment; filename*=UTF-8''")
    assert quote("배경_edit_") in disposition
    assert Image.open(io.BytesIO(response.content)).size == (80, 60)

    # Export leaves the items but clears the selection
    state = client.get(_url(editor)).json()["state"]
    assert len(state["texts"]) == 1
    assert state["selected_id"] is None


def test_export_jpg(client, editor):
    response = client.post(_url(editor, "/export"), params={"format": "jpg"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert ".jpg" in response.headers["content-disposition"]


def test_leave_editor_discards_session(client, editor):
    response = client.delete(_url(editor))
    assert response.json()["message"] == "Editor closed"
    assert client.get(_url(editor)).status_code == 404


def test_calendar_grid_endpoint(client):
    body = client.get("/api/calendar/2025/10").json()
    assert body["title"] == "2025년 10월"
    assert len(body["cells"]) == 42
    assert body["holidays"]["3"] == "개천절"
    assert body["holidays_supported"] is True

    body = client.get("/api/calendar/2030/1", params={"show_holidays": False}).json()
    assert body["holidays"] == {}
    assert body["holidays_supported"] is False


def test_calendar_grid_rejects_bad_month(client):
    assert client.get("/api/calendar/2025/13").status_code == 422


def test_drag_rejects_non_finite_delta(client, editor):
    item_id = client.post(_url(editor, "/items/text"), json={}).json()["item_id"]

    response = client.post(
        _url(editor, f"/items/{item_id}/drag"),
        content='{"phase": "stop", "dx": NaN, "dy": 0}',
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 422

    position = client.get(_url(editor)).json()["selected"]["position"]
    assert position == {"x": 50.0, "y": 50.0}
    assert client.post(_url(editor, "/export")).status_code == 200


def test_zoom_rejects_non_finite_scale(client, editor):
    response = client.post(
        _url(editor, "/zoom"),
        content='{"action": "set", "scale": Infinity}',
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 422
