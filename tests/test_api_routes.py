"""
Tests for the HTTP API.
"""

import io
import zipfile

from PIL import Image

from carousel_studio.api import canvas_routes


def _create(client, **body):
    response = client.post("/api/canvas/session", json=body or None)
    assert response.status_code == 200
    return response.json()["session_id"]


def _state(client, session_id):
    return client.get(f"/api/canvas/state/{session_id}").json()


# ============ Service ============

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_api_info(client):
    info = client.get("/api/info").json()
    assert info["canvas"] == {"width": 1080, "height": 1080, "max_slides": 10}
    assert info["export"]["pixel_ratios"] == {"low": 1, "medium": 2, "high": 3}


# ============ Sessions & slides ============

def test_create_session_defaults_to_one_empty_slide(client):
    session_id = _create(client)
    state = _state(client, session_id)

    assert len(state["slides"]) == 1
    assert state["current_slide_index"] == 0
    assert state["can_add_slide"] is True
    assert state["can_undo"] is False


def test_create_session_from_template(client):
    session_id = _create(client, template_id="carousel-outline")
    state = _state(client, session_id)
    assert len(state["slides"]) == 7
    assert state["template_id"] == "carousel-outline"


def test_create_session_unknown_template(client):
    response = client.post("/api/canvas/session", json={"template_id": "nope"})
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "TemplateNotFound"


def test_unknown_session_is_404(client):
    assert client.get("/api/canvas/state/missing").status_code == 404
    assert client.post("/api/canvas/missing/slides").status_code == 404


def test_slide_lifecycle(client):
    session_id = _create(client)

    added = client.post(f"/api/canvas/{session_id}/slides").json()
    assert added["current_slide_index"] == 1
    assert len(added["state"]["slides"]) == 2

    duplicated = client.post(f"/api/canvas/{session_id}/slides/0/duplicate").json()
    assert duplicated["current_slide_index"] == 1
    assert len(duplicated["state"]["slides"]) == 3

    moved = client.post(f"/api/canvas/{session_id}/slides/reorder", json={"from_index": 0, "to_index": 2}).json()
    assert moved["current_slide_index"] == 2

    deleted = client.delete(f"/api/canvas/{session_id}/slides/2").json()
    assert len(deleted["state"]["slides"]) == 2
    assert deleted["current_slide_index"] == 1


def test_last_slide_cannot_be_deleted(client):
    session_id = _create(client)
    response = client.delete(f"/api/canvas/{session_id}/slides/0")
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "LastSlideRemoval"


def test_capacity_limit(client):
    session_id = _create(client)
    for _ in range(9):
        assert client.post(f"/api/canvas/{session_id}/slides").status_code == 200

    response = client.post(f"/api/canvas/{session_id}/slides")
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "CapacityExceeded"
    assert _state(client, session_id)["can_add_slide"] is False


def test_invalid_slide_index(client):
    session_id = _create(client)
    response = client.put(f"/api/canvas/{session_id}/current-slide", json={"index": 3})
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "InvalidSlideIndex"


def test_background_view_and_undo(client):
    session_id = _create(client)

    client.put(f"/api/canvas/{session_id}/slides/0/background", json={"color": "#000000"})
    assert _state(client, session_id)["slides"][0]["background_color"] == "#000000"

    view = client.put(f"/api/canvas/{session_id}/view", json={"zoom": 5, "toggle_grid": True}).json()
    assert (view["zoom"], view["show_grid"]) == (2.0, True)

    assert client.post(f"/api/canvas/{session_id}/undo").json()["changed"] is True
    assert _state(client, session_id)["slides"][0]["background_color"] == "#ffffff"
    assert client.post(f"/api/canvas/{session_id}/redo").json()["changed"] is True
    assert client.post(f"/api/canvas/{session_id}/redo").json()["changed"] is False


def test_apply_template_and_clear(client):
    session_id = _create(client)
    applied = client.post(f"/api/canvas/{session_id}/template", json={"template_id": "minimal"}).json()
    assert len(applied["state"]["slides"]) == 5

    response = client.delete(f"/api/canvas/state/{session_id}")
    assert response.status_code == 200
    cleared = response.json()
    assert cleared["message"] == "Canvas cleared"
    assert len(cleared["state"]["slides"]) == 1
    assert cleared["state"]["template_id"] is None
    assert _state(client, session_id)["slides"] == cleared["state"]["slides"]


def test_preview_png(client):
    session_id = _create(client, template_id="professional")
    response = client.get(f"/api/canvas/{session_id}/preview", params={"width": 400, "height": 600})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    with Image.open(io.BytesIO(response.content)) as image:
        assert image.size == (400, 400)


def test_session_reloads_from_disk(client):
    session_id = _create(client, template_id="carousel-outline")
    before = _state(client, session_id)["slides"]

    sm = canvas_routes.state_manager
    sm._cache.clear()

    assert _state(client, session_id)["slides"] == before


# ============ Elements ============

def test_element_add_update_select_delete(client):
    session_id = _create(client)

    added = client.post(f"/api/element/{session_id}", json={"element_type": "text"}).json()
    element_id = added["element_id"]
    assert added["element_type"] == "text"
    assert _state(client, session_id)["selected_element_id"] == element_id

    updated = client.put(
        f"/api/element/{session_id}/{element_id}", json={"updates": {"text": "Hello", "x": 12}}
    ).json()
    assert updated["element"]["text"] == "Hello"
    assert updated["element"]["x"] == 12

    cleared = client.put(f"/api/element/{session_id}", json={"element_id": None}).json()
    assert cleared["selected_element_id"] is None

    assert client.delete(f"/api/element/{session_id}/{element_id}").status_code == 200
    assert _state(client, session_id)["slides"][0]["elements"] == []


def test_add_library_shape_and_image(client):
    session_id = _create(client)

    circle = client.post(
        f"/api/element/{session_id}", json={"element_type": "shape", "shape_type": "circle"}
    ).json()
    assert circle["element"]["shape_type"] == "circle"

    image = client.post(
        f"/api/element/{session_id}", json={"element_type": "image", "src": "https://cdn.example.com/a.png"}
    ).json()
    assert image["element"]["src"] == "https://cdn.example.com/a.png"


def test_invalid_element_update_rejected(client):
    session_id = _create(client)
    element_id = client.post(f"/api/element/{session_id}", json={"element_type": "shape"}).json()["element_id"]

    response = client.put(f"/api/element/{session_id}/{element_id}", json={"updates": {"text": "nope"}})
    assert response.status_code == 422

    assert client.delete(f"/api/element/{session_id}/missing").status_code == 404
    assert client.put(f"/api/element/{session_id}", json={"element_id": "missing"}).status_code == 404


# ============ Templates ============

def test_list_and_filter_templates(client):
    listed = client.get("/api/templates").json()
    assert listed["count"] == 5
    assert listed["templates"][0]["id"] == "carousel-outline"

    bold = client.get("/api/templates", params={"category": "bold"}).json()
    assert [t["id"] for t in bold["templates"]] == ["bold-impact"]

    categories = client.get("/api/templates/categories").json()["categories"]
    assert categories == ["professional", "minimal", "bold", "creative"]


def test_template_detail_and_analysis(client):
    assert client.get("/api/templates/minimal").json()["id"] == "minimal"
    assert client.get("/api/templates/nope").status_code == 404

    analysis = client.get("/api/templates/carousel-outline/analysis").json()
    assert analysis["total_slots"] == 7
    assert analysis["summary"].startswith("Template:")


def test_brand_kit_templates_are_registered(client):
    response = client.post("/api/templates/brand-kit", json={"primary_color": "#0a66c2"})
    assert response.status_code == 200
    for template_id in response.json()["template_ids"]:
        assert client.get(f"/api/templates/{template_id}").status_code == 200

    assert client.post("/api/templates/brand-kit", json={"primary_color": "blue"}).status_code == 422


# ============ AI generation ============

def test_generate_carousel_fills_every_slot(client, fake_llm):
    session_id = _create(client, template_id="carousel-outline")

    response = client.post(
        f"/api/ai/carousel/{session_id}",
        json={"topic": "5 productivity hacks that actually work", "tone": "casual", "cta_type": "follow"}
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["filled_slots"], body["total_slots"]) == (7, 7)
    assert body["warnings"] == []
    assert fake_llm.calls == 1
    texts = [e["text"] for s in body["state"]["slides"] for e in s["elements"] if e["type"] == "text"]
    assert texts == [f"Generated text for slide {n}" for n in range(1, 8)]
    assert body["state"]["is_generating"] is False


def test_generate_with_explicit_template(client):
    session_id = _create(client)
    response = client.post(
        f"/api/ai/carousel/{session_id}",
        json={"topic": "How to write better LinkedIn hooks", "template_id": "minimal"}
    )
    assert response.status_code == 200
    assert _state(client, session_id)["template_id"] == "minimal"


def test_generate_rejects_short_topic(client, fake_llm):
    session_id = _create(client, template_id="carousel-outline")
    response = client.post(f"/api/ai/carousel/{session_id}", json={"topic": "too short"})
    assert response.status_code == 422
    assert fake_llm.calls == 0


def test_generate_without_template_is_rejected(client):
    session_id = _create(client)
    response = client.post(f"/api/ai/carousel/{session_id}", json={"topic": "A topic that is long enough"})
    assert response.status_code == 422


def test_generate_while_busy_is_conflict(client, fake_llm):
    session_id = _create(client, template_id="carousel-outline")
    before = _state(client, session_id)["slides"]
    canvas_routes.state_manager.get_editor(session_id).is_exporting = True

    response = client.post(f"/api/ai/carousel/{session_id}", json={"topic": "A topic that is long enough"})

    assert response.status_code == 409
    assert fake_llm.calls == 0
    assert _state(client, session_id)["slides"] == before


def test_generation_failure_keeps_document(client, fake_llm):
    from carousel_studio.models.generation_models import GenerationResponse

    session_id = _create(client, template_id="carousel-outline")
    before = _state(client, session_id)["slides"]
    fake_llm.response = GenerationResponse(success=False, error="model overloaded")

    response = client.post(f"/api/ai/carousel/{session_id}", json={"topic": "A topic that is long enough"})

    assert response.status_code == 502
    assert response.json()["detail"]["upstream_error"] == "model overloaded"
    assert _state(client, session_id)["slides"] == before
    assert _state(client, session_id)["is_generating"] is False


# ============ Export ============

def test_export_pdf_by_default(client):
    session_id = _create(client, template_id="minimal")
    response = client.post(f"/api/export/{session_id}", json={"quality": "low"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["x-page-count"] == "5"
    assert "attachment" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_export_single_png(client):
    session_id = _create(client)
    response = client.post(f"/api/export/{session_id}", json={"format": "png", "quality": "low"})

    assert response.headers["content-type"] == "image/png"
    with Image.open(io.BytesIO(response.content)) as image:
        assert image.size == (1080, 1080)


def test_export_png_zip_for_many_slides(client):
    session_id = _create(client, template_id="carousel-outline")
    response = client.post(
        f"/api/export/{session_id}", json={"format": "png", "quality": "low", "file_name": "hacks"}
    )

    assert response.headers["content-type"] == "application/zip"
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == [f"hacks-slide-{n}.png" for n in range(1, 8)]


def test_export_while_generating_is_conflict(client):
    session_id = _create(client)
    canvas_routes.state_manager.get_editor(session_id).is_generating = True
    assert client.post(f"/api/export/{session_id}").status_code == 409
