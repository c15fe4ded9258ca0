from datetime import date

import pytest
from sqlalchemy import select

from sams.models.appraisal import Appraisal
from sams.models.assignment import AppraiserAssignment
from sams.services.appraisals import current_term


def _payload(appraiser, appraisee, document, status="DRAFT", appraisal_id=None, role=None):
    body = {
        "appraiser_id": appraiser.id,
        "appraisee_id": appraisee.id,
        "status": status,
        "appraisal_data": document,
    }
    if appraisal_id:
        body["appraisal_id"] = appraisal_id
    if role:
        body["role"] = role
    return body


@pytest.fixture
async def saved(client, headers, section_head, teacher, teaching_document):
    """A draft appraisal of the teacher by their section head."""
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(complete=False)),
        headers=headers(section_head),
    )
    assert resp.status_code == 200
    return resp.json()["appraisal"]


async def test_save_creates_draft(saved):
    assert saved["status"] == "DRAFT"
    assert saved["appraisal_data"]["term"] == "Term 1"
    assert saved["overall_score"] == 5
    assert saved["deletion_requested"] is False


async def test_resave_same_period_updates_in_place(client, headers, db, section_head, teacher, teaching_document, saved):
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(), status="TARGETS_SET"),
        headers=headers(section_head),
    )
    body = resp.json()
    assert resp.status_code == 200
    assert body["message"] == "Targets set successfully"
    assert body["appraisal"]["id"] == saved["id"]

    result = await db.execute(select(Appraisal))
    assert len(result.scalars().all()) == 1


async def test_other_term_creates_new_record(client, headers, section_head, teacher, teaching_document, saved):
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(term="Term 2", complete=False)),
        headers=headers(section_head),
    )
    assert resp.json()["appraisal"]["id"] != saved["id"]


async def test_save_as_someone_else_is_forbidden(client, headers, section_head, teacher, teaching_document):
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document()),
        headers=headers(teacher),
    )
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "error": "Unauthorized operation"}


async def test_gate_failure_is_reported(client, headers, section_head, teacher, teaching_document, saved):
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(complete=False), status="TARGETS_SET", appraisal_id=saved["id"]),
        headers=headers(section_head),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Both Appraiser and Appraisee must sign before setting targets."


async def test_complete_and_score(client, headers, section_head, teacher, teaching_document, saved):
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(), status="COMPLETED", appraisal_id=saved["id"]),
        headers=headers(section_head),
    )
    assert resp.json()["message"] == "Appraisal completed successfully"

    resp = await client.get(f"/appraisals/{saved['id']}", headers=headers(teacher))
    body = resp.json()
    assert body["status"] == "COMPLETED"
    assert body["overall_score"] == 93
    assert body["score"]["percentage"] == 100
    assert body["score"]["rating"] == "Leading"


async def test_cannot_move_backwards_without_reset(client, headers, director, section_head, teacher, teaching_document, saved):
    await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(), status="COMPLETED", appraisal_id=saved["id"]),
        headers=headers(section_head),
    )
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(), status="TARGETS_SET", appraisal_id=saved["id"]),
        headers=headers(section_head),
    )
    assert resp.status_code == 400

    resp = await client.post(f"/appraisals/{saved['id']}/reset", json={"status": "DRAFT"}, headers=headers(section_head))
    assert resp.status_code == 403
    assert resp.json()["error"] == "Only Directors can reset appraisal status"

    resp = await client.post(f"/appraisals/{saved['id']}/reset", json={"status": "TARGETS_SET"}, headers=headers(director))
    assert resp.status_code == 200
    assert resp.json()["appraisal"]["status"] == "TARGETS_SET"


async def test_complete_single_observation(client, headers, section_head, teacher, teaching_document):
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document()),
        headers=headers(section_head),
    )
    appraisal_id = resp.json()["appraisal"]["id"]

    resp = await client.post(f"/appraisals/{appraisal_id}/observations/1/complete", headers=headers(section_head))
    body = resp.json()["appraisal"]
    assert body["status"] == "DRAFT"
    assert body["appraisal_data"]["observation1"]["status"] == "COMPLETED"

    resp = await client.post(f"/appraisals/{appraisal_id}/observations/2/complete", headers=headers(section_head))
    assert resp.status_code == 400
    assert "(Missing item 1)" in resp.json()["error"]


async def test_unrelated_user_cannot_read(client, headers, make_user, saved):
    outsider = await make_user("COOKS", "cook@school.com")
    resp = await client.get(f"/appraisals/{saved['id']}", headers=headers(outsider))
    assert resp.status_code == 403


async def test_missing_appraisal_is_404(client, headers, director):
    resp = await client.get("/appraisals/does-not-exist", headers=headers(director))
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Appraisal not found"}


async def test_deletion_request_flow(client, headers, director, section_head, teacher, saved):
    resp = await client.post(
        f"/appraisals/{saved['id']}/deletion-request", json={"reason": "Duplicate"}, headers=headers(teacher),
    )
    assert resp.status_code == 403

    resp = await client.post(
        f"/appraisals/{saved['id']}/deletion-request", json={"reason": "Duplicate"}, headers=headers(section_head),
    )
    assert resp.json()["appraisal"]["deletion_requested"] is True

    resp = await client.get("/appraisals/deletion-requests", headers=headers(director))
    assert [a["id"] for a in resp.json()] == [saved["id"]]

    resp = await client.post(f"/appraisals/{saved['id']}/deletion/reject", headers=headers(director))
    assert resp.json()["appraisal"]["deletion_reason"] is None

    await client.post(
        f"/appraisals/{saved['id']}/deletion-request", json={"reason": "Wrong term"}, headers=headers(section_head),
    )
    resp = await client.post(f"/appraisals/{saved['id']}/deletion/approve", headers=headers(director))
    assert resp.json()["success"] is True
    resp = await client.get(f"/appraisals/{saved['id']}", headers=headers(director))
    assert resp.status_code == 404


async def test_list_filters_by_period(client, headers, section_head, saved):
    resp = await client.get("/appraisals", params={"term": "Term 1", "year": "2026"}, headers=headers(section_head))
    assert [a["id"] for a in resp.json()] == [saved["id"]]
    resp = await client.get("/appraisals", params={"term": "Term 3"}, headers=headers(section_head))
    assert resp.json() == []


async def test_deleting_user_removes_their_records(client, headers, db, director, section_head, teacher, saved):
    await client.put(f"/assignments/{teacher.id}", json={"appraiser_id": section_head.id}, headers=headers(director))

    resp = await client.delete(f"/users/{teacher.id}", headers=headers(director))
    assert resp.json() == {"success": True}

    assert (await db.execute(select(Appraisal))).scalars().all() == []
    assert (await db.execute(select(AppraiserAssignment))).scalars().all() == []


async def test_team_report(client, headers, director, section_head, teacher, make_user, teaching_document):
    head_teacher = await make_user("HEAD TEACHER", "head@school.com")
    await client.put(f"/assignments/{section_head.id}", json={"appraiser_id": head_teacher.id}, headers=headers(director))
    await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(complete=False)),
        headers=headers(section_head),
    )

    resp = await client.get("/reports/team", headers=headers(head_teacher))
    body = resp.json()
    assert len(body) == 1
    assert body[0]["appraiser_id"] == section_head.id


async def test_login(client, teacher):
    resp = await client.post("/auth/login", json={"email": "teacher@school.com", "password": "appraise-me-123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "TEACHERS"

    resp = await client.post("/auth/login", json={"email": "teacher@school.com", "password": "wrong-password"})
    assert resp.status_code == 401


@pytest.mark.parametrize("today, expected", [
    (date(2026, 1, 15), ("Term 1", "2026")),
    (date(2026, 5, 1), ("Term 2", "2026")),
    (date(2026, 9, 30), ("Term 3", "2026")),
    (date(2026, 12, 2), ("Term 1", "2027")),
])
def test_current_term(today, expected):
    assert current_term(today) == expected


async def test_null_role_uses_appraisee_primary_role(client, headers, section_head, teacher, teaching_document):
    resp = await client.post(
        "/appraisals",
        json=_payload(section_head, teacher, teaching_document(), status="COMPLETED"),
        headers=headers(section_head),
    )
    assert resp.status_code == 200
    body = resp.json()["appraisal"]
    assert body["role"] is None
    assert body["overall_score"] == 93

    resp = await client.get(f"/appraisals/{body['id']}", headers=headers(section_head))
    score = resp.json()["score"]
    assert score["max_targets"] == 33
    assert score["max_observation"] == 36
    assert score["max_total"] == 93


async def test_save_for_unknown_appraisee_is_404(client, headers, section_head, teaching_document):
    body = {
        "appraiser_id": section_head.id,
        "appraisee_id": "missing-user",
        "appraisal_data": teaching_document(complete=False),
    }
    resp = await client.post("/appraisals", json=body, headers=headers(section_head))
    assert resp.status_code == 404
    assert resp.json()["error"] == "Appraisee not found"


async def test_completed_slot_sent_by_client_is_validated(client, headers, section_head, teacher, teaching_document):
    document = teaching_document(complete=False)
    document["observation1"] = {"status": "COMPLETED"}
    resp = await client.post("/appraisals", json=_payload(section_head, teacher, document), headers=headers(section_head))
    assert resp.status_code == 400
    assert "(Missing item 1)" in resp.json()["error"]


async def test_approve_requires_pending_request(client, headers, director, saved):
    resp = await client.post(f"/appraisals/{saved['id']}/deletion/approve", headers=headers(director))
    assert resp.status_code == 400
    assert resp.json()["error"] == "No deletion request is pending for this appraisal"

    resp = await client.get(f"/appraisals/{saved['id']}", headers=headers(director))
    assert resp.status_code == 200


async def test_role_change_drops_it_from_additional_roles(client, headers, director, make_user):
    user = await make_user("TEACHERS", "panel@school.com", additional_roles=["HEAD OF PANELS", "CLASS TEACHERS"])
    resp = await client.patch(
        f"/users/{user.id}",
        json={"role": "HEAD OF PANELS", "job_category": "FIRSTLINE_LEADERSHIP"},
        headers=headers(director),
    )
    body = resp.json()
    assert body["role"] == "HEAD OF PANELS"
    assert body["additional_roles"] == ["CLASS TEACHERS"]
