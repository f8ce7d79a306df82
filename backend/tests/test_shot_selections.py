"""Test Shot 에셋 선택 원장(promote/discard 투영)과 최종 비주얼 지정을 검증하는 자동화 테스트입니다."""

import json
import logging

import pytest
from fastapi import HTTPException

from app.models.decision_note import DecisionNote
from app.schemas.decision_note import ImageSnapshot, PromptSnapshot
from app.schemas.shot_selection import DiscardSelectionRequest, PromoteSelectionRequest
from app.services import selection_service


def _promote(db, shot, src, take_id=None):
    return selection_service.promote_selection(
        db,
        shot.id,
        PromoteSelectionRequest(
            project_id=shot.project_id,
            take_id=take_id,
            image_node_id=f"node-{src}",
            image_snapshot=ImageSnapshot(src=f"https://cdn.local/{src}", storage_path=f"shots/{src}"),
        ),
    )


def _discard(db, shot, selection_id, reason="manual"):
    selection_service.discard_selection(
        db, shot.id, selection_id, DiscardSelectionRequest(project_id=shot.project_id, reason=reason)
    )


def test_promote_numbers_and_discard_projection(db, seed_shot, seed_takes):
    first = _promote(db, seed_shot, "a.png", take_id=seed_takes[0].id)
    second = _promote(db, seed_shot, "b.png")
    assert first["selection_number"] == 1
    assert second["selection_number"] == 2

    _discard(db, seed_shot, first["selection_id"], reason="undo")

    active = selection_service.list_active_selections(db, seed_shot.id)
    assert [s["selection_id"] for s in active] == [second["selection_id"]]
    assert active[0]["selection_number"] == 2
    assert active[0]["src"] == "https://cdn.local/b.png"
    assert active[0]["storage_path"] == "shots/b.png"
    assert active[0]["node_id"] == "node-b.png"


def test_discard_appends_and_never_removes_promote(db, seed_shot):
    promoted = _promote(db, seed_shot, "a.png")
    _discard(db, seed_shot, promoted["selection_id"])

    assert db.query(DecisionNote).filter(DecisionNote.id == promoted["selection_id"]).first() is not None
    assert db.query(DecisionNote).count() == 2
    # discard 후에도 번호는 promote 이벤트 수 기준으로 이어진다.
    assert _promote(db, seed_shot, "b.png")["selection_number"] == 2


def test_repeated_and_premature_discards_are_harmless(db, seed_shot):
    _discard(db, seed_shot, "not-yet-promoted")
    kept = _promote(db, seed_shot, "a.png")
    dropped = _promote(db, seed_shot, "b.png")
    _discard(db, seed_shot, dropped["selection_id"])
    _discard(db, seed_shot, dropped["selection_id"])

    active = selection_service.list_active_selections(db, seed_shot.id)
    assert [s["selection_id"] for s in active] == [kept["selection_id"]]


def test_malformed_and_unknown_bodies_are_skipped(db, seed_shot):
    db.add(DecisionNote(parent_type="shot", parent_id=seed_shot.id, body="{broken json"))
    db.add(DecisionNote(parent_type="shot", parent_id=seed_shot.id, body='{"event": "storyboard_pin", "schema_version": 2}'))
    db.add(DecisionNote(parent_type="shot", parent_id=seed_shot.id, body='{"event": "promote_asset"}'))
    db.add(DecisionNote(
        parent_type="shot",
        parent_id=seed_shot.id,
        body='{"event": "decision_lock", "approved_take_id": "t1", "text": "lock"}',
    ))
    db.commit()

    assert selection_service.list_active_selections(db, seed_shot.id) == []
    assert _promote(db, seed_shot, "a.png")["selection_number"] == 1
    assert db.query(DecisionNote).filter(DecisionNote.body == "{broken json").count() == 1


def test_legacy_promote_body_without_schema_version(db, seed_shot):
    db.add(DecisionNote(
        parent_type="shot",
        parent_id=seed_shot.id,
        body=(
            '{"event": "promote_asset", "selection_number": 1, "take_id": null, "image_node_id": "n9", '
            '"image_snapshot": {"src": "https://cdn.local/old.png", "storage_path": "old.png", '
            '"naturalWidth": 640, "naturalHeight": 360}, "prompt_snapshot": null}'
        ),
    ))
    db.commit()

    active = selection_service.list_active_selections(db, seed_shot.id)
    assert len(active) == 1
    assert active[0]["src"] == "https://cdn.local/old.png"
    assert _promote(db, seed_shot, "new.png")["selection_number"] == 2


def test_selection_number_collision_is_retried(db, seed_shot, monkeypatch, caplog):
    _promote(db, seed_shot, "a.png")
    real_count = selection_service._count_promotions
    stale = iter([0])

    def racing_count(session, shot_id):
        try:
            return next(stale)
        except StopIteration:
            return real_count(session, shot_id)

    monkeypatch.setattr(selection_service, "_count_promotions", racing_count)
    with caplog.at_level(logging.WARNING, logger="app.services.selection_service"):
        result = _promote(db, seed_shot, "b.png")

    assert result["selection_number"] == 2
    assert any("selection_number 1 already taken" in r.getMessage() for r in caplog.records)


def test_selection_number_collision_gives_up_after_limit(db, seed_shot, monkeypatch):
    _promote(db, seed_shot, "a.png")
    monkeypatch.setattr(selection_service, "_count_promotions", lambda session, shot_id: 0)

    with pytest.raises(HTTPException) as exc:
        _promote(db, seed_shot, "b.png")
    assert exc.value.status_code == 409
    assert db.query(DecisionNote).count() == 1


def test_promote_requires_project_and_shot(db, seed_shot):
    with pytest.raises(HTTPException) as exc:
        selection_service.promote_selection(
            db,
            seed_shot.id,
            PromoteSelectionRequest(project_id="", image_snapshot=ImageSnapshot(src="x.png")),
        )
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        selection_service.promote_selection(
            db,
            "missing-shot",
            PromoteSelectionRequest(project_id="proj-1", image_snapshot=ImageSnapshot(src="x.png")),
        )
    assert exc.value.status_code == 404
    assert db.query(DecisionNote).count() == 0


def test_final_visual_accepts_only_active_promotions(db, seed_shot):
    kept = _promote(db, seed_shot, "a.png")
    dropped = _promote(db, seed_shot, "b.png")
    _discard(db, seed_shot, dropped["selection_id"])
    lock_note = DecisionNote(
        parent_type="shot",
        parent_id=seed_shot.id,
        body='{"event": "decision_lock", "approved_take_id": "t1", "text": "lock"}',
    )
    db.add(lock_note)
    db.commit()

    result = selection_service.set_final_visual(db, seed_shot.id, kept["selection_id"])
    assert result["final_visual_selection_id"] == kept["selection_id"]

    for bad_id in (dropped["selection_id"], lock_note.id):
        with pytest.raises(HTTPException) as exc:
            selection_service.set_final_visual(db, seed_shot.id, bad_id)
        assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        selection_service.set_final_visual(db, seed_shot.id, "missing")
    assert exc.value.status_code == 404

    assert selection_service.clear_final_visual(db, seed_shot.id)["final_visual_selection_id"] is None


def test_selection_api_flow(client, seed_shot):
    payload = {
        "project_id": seed_shot.project_id,
        "image_snapshot": {"src": "https://cdn.local/a.png", "storage_path": "a.png", "naturalWidth": 1920, "naturalHeight": 1080},
        "prompt_snapshot": {"body": "low angle", "promptType": "visual", "origin": "manual"},
    }
    first = client.post(f"/api/shots/{seed_shot.id}/selections", json=payload)
    assert first.status_code == 200, first.text
    assert first.json()["selection_number"] == 1
    second = client.post(f"/api/shots/{seed_shot.id}/selections", json=payload).json()
    assert second["selection_number"] == 2

    discard = client.post(
        f"/api/shots/{seed_shot.id}/selections/{first.json()['selection_id']}/discard",
        json={"project_id": seed_shot.project_id, "reason": "undo"},
    )
    assert discard.status_code == 200

    active = client.get(f"/api/shots/{seed_shot.id}/selections").json()
    assert [s["selection_number"] for s in active] == [2]

    fv = client.put(f"/api/shots/{seed_shot.id}/final-visual", json={"selection_id": second["selection_id"]})
    assert fv.json()["final_visual_selection_id"] == second["selection_id"]
    cleared = client.delete(f"/api/shots/{seed_shot.id}/final-visual")
    assert cleared.json()["final_visual_selection_id"] is None


def test_discard_api_rejects_unknown_reason(client, seed_shot):
    resp = client.post(
        f"/api/shots/{seed_shot.id}/selections/abc/discard",
        json={"project_id": seed_shot.project_id, "reason": "because"},
    )
    assert resp.status_code == 422


def test_discard_with_foreign_reason_still_hides_selection(db, seed_shot):
    kept = _promote(db, seed_shot, "a.png")
    replaced = _promote(db, seed_shot, "b.png")
    db.add(DecisionNote(
        parent_type="shot",
        parent_id=seed_shot.id,
        body=json.dumps({
            "event": "discard_promote_asset",
            "selection_id": replaced["selection_id"],
            "reason": "replaced",
            "timestamp": "yesterday",
        }),
    ))
    db.add(DecisionNote(
        parent_type="shot",
        parent_id=seed_shot.id,
        body='{"event": "discard_promote_asset", "selection_id": ""}',
    ))
    db.commit()

    active = selection_service.list_active_selections(db, seed_shot.id)
    assert [s["selection_id"] for s in active] == [kept["selection_id"]]


def test_discard_requires_existing_shot(db, seed_shot):
    with pytest.raises(HTTPException) as exc:
        selection_service.discard_selection(
            db, "missing-shot", "abc", DiscardSelectionRequest(project_id="proj-1")
        )
    assert exc.value.status_code == 404
    assert db.query(DecisionNote).count() == 0


def test_promote_body_keeps_camel_case_snapshot_keys(db, seed_shot):
    promoted = selection_service.promote_selection(
        db,
        seed_shot.id,
        PromoteSelectionRequest(
            project_id=seed_shot.project_id,
            image_snapshot=ImageSnapshot(src="a.png", storage_path="a.png", natural_width=1280, natural_height=720),
            prompt_snapshot=PromptSnapshot(body="wide shot", prompt_type="visual"),
        ),
    )
    note = db.query(DecisionNote).filter(DecisionNote.id == promoted["selection_id"]).first()
    body = json.loads(note.body)

    assert body["image_snapshot"]["naturalWidth"] == 1280
    assert "natural_width" not in body["image_snapshot"]
    assert body["prompt_snapshot"]["promptType"] == "visual"
    assert body["selection_number"] == 1


def test_get_final_visual(db, seed_shot, seed_takes):
    assert selection_service.get_final_visual(db, seed_shot.id) is None

    chosen = _promote(db, seed_shot, "hero.png", take_id=seed_takes[1].id)
    selection_service.set_final_visual(db, seed_shot.id, chosen["selection_id"])

    assert selection_service.get_final_visual(db, seed_shot.id) == {
        "selection_id": chosen["selection_id"],
        "src": "https://cdn.local/hero.png",
        "storage_path": "shots/hero.png",
        "selection_number": 1,
        "take_id": seed_takes[1].id,
    }

    seed_shot.final_visual_selection_id = "gone"
    db.commit()
    assert selection_service.get_final_visual(db, seed_shot.id) is None


def test_final_visual_api_roundtrip(client, seed_shot):
    assert client.get(f"/api/shots/{seed_shot.id}/final-visual").json() is None

    promoted = client.post(
        f"/api/shots/{seed_shot.id}/selections",
        json={"project_id": seed_shot.project_id, "image_snapshot": {"src": "a.png", "storage_path": "a.png"}},
    ).json()
    client.put(f"/api/shots/{seed_shot.id}/final-visual", json={"selection_id": promoted["selection_id"]})

    resp = client.get(f"/api/shots/{seed_shot.id}/final-visual")
    assert resp.status_code == 200
    assert resp.json()["selection_id"] == promoted["selection_id"]
    assert resp.json()["selection_number"] == 1

    client.delete(f"/api/shots/{seed_shot.id}/final-visual")
    assert client.get(f"/api/shots/{seed_shot.id}/final-visual").json() is None
    assert client.get("/api/shots/missing/final-visual").status_code == 404
