"""
Incubation pipeline tests.

Covers:
  - nominate: defaults, target enum, unknown project, audit row
  - update_incubation: partial updates, score bounds, empty update (no write)
  - list: join with project, newest first, arsenal_ready filter
  - Admin API: status codes and moderator guard
"""

import pytest

from arsenal.core.exceptions import NotFoundError, ValidationError
from arsenal.models import db
from arsenal.models.audit import AuditLogEntry
from arsenal.models.incubation import IncubationProject
from arsenal.models.project import Project
from arsenal.services import incubation_service


@pytest.fixture()
def project(author):
    p = Project(
        name="Phish Triage Bot",
        description="Automated phishing triage playbooks",
        status="published",
        submitted_by=author.id,
    )
    db.session.add(p)
    db.session.commit()
    return p


def _nominate(project, moderator, target="pre-sales"):
    return incubation_service.nominate(project.id, target, actor=moderator, notes="Strong demo")


class TestNominate:
    def test_defaults(self, project, moderator):
        inc = _nominate(project, moderator)
        assert inc.status == "nominated"
        assert inc.maturity_score == 0
        assert inc.nominated_by == moderator.id
        assert inc.notes == "Strong demo"

    def test_writes_one_audit_row(self, project, moderator):
        inc = _nominate(project, moderator, target="global")
        rows = AuditLogEntry.query.filter_by(action="nominate_incubation").all()
        assert len(rows) == 1
        assert rows[0].resource_id == inc.id
        assert rows[0].resource_type == "incubation_project"
        assert rows[0].details == {"project_id": project.id, "target": "global"}

    def test_invalid_target(self, project, moderator):
        with pytest.raises(ValidationError) as exc:
            _nominate(project, moderator, target="everywhere")
        assert "target" in exc.value.details
        assert IncubationProject.query.count() == 0
        assert AuditLogEntry.query.count() == 0

    def test_notes_must_be_text(self, project, moderator):
        with pytest.raises(ValidationError):
            incubation_service.nominate(project.id, "global", actor=moderator, notes={"a": 1})
        assert IncubationProject.query.count() == 0

    def test_unknown_project(self, moderator):
        with pytest.raises(NotFoundError):
            incubation_service.nominate("no-such-project", "pre-sales", actor=moderator)


class TestUpdate:
    def test_partial_update_audits_supplied_fields(self, project, moderator):
        inc = _nominate(project, moderator)
        updated = incubation_service.update_incubation(
            inc.id, {"maturity_score": 70}, actor=moderator,
        )
        assert updated.maturity_score == 70
        assert updated.status == "nominated"

        entry = AuditLogEntry.query.filter_by(action="update_incubation").one()
        assert entry.resource_id == inc.id
        assert entry.details == {"maturity_score": 70}

    def test_zero_score_counts_as_update(self, project, moderator):
        inc = _nominate(project, moderator)
        incubation_service.update_incubation(inc.id, {"maturity_score": 50}, actor=moderator)
        updated = incubation_service.update_incubation(inc.id, {"maturity_score": 0}, actor=moderator)
        assert updated.maturity_score == 0

    def test_status_and_notes(self, project, moderator):
        inc = _nominate(project, moderator)
        updated = incubation_service.update_incubation(
            inc.id, {"status": "in-review", "notes": "Demo scheduled"}, actor=moderator,
        )
        assert updated.status == "in-review"
        assert updated.notes == "Demo scheduled"

    def test_empty_update_performs_no_write(self, project, moderator):
        inc = _nominate(project, moderator)
        incubations_before = IncubationProject.query.count()
        audit_before = AuditLogEntry.query.count()

        with pytest.raises(ValidationError) as exc:
            incubation_service.update_incubation(inc.id, {}, actor=moderator)
        assert str(exc.value) == "No updates provided"

        assert IncubationProject.query.count() == incubations_before
        assert AuditLogEntry.query.count() == audit_before

    def test_empty_strings_are_not_updates(self, project, moderator):
        inc = _nominate(project, moderator)
        with pytest.raises(ValidationError):
            incubation_service.update_incubation(
                inc.id, {"status": "", "notes": "", "maturity_score": None}, actor=moderator,
            )

    @pytest.mark.parametrize("score", [-1, 101, "high", 42.5, True, float("inf"), float("nan")])
    def test_score_bounds(self, project, moderator, score):
        inc = _nominate(project, moderator)
        with pytest.raises(ValidationError):
            incubation_service.update_incubation(inc.id, {"maturity_score": score}, actor=moderator)

    @pytest.mark.parametrize("notes", [{"text": "x"}, ["a", "b"], 7])
    def test_notes_must_be_text(self, project, moderator, notes):
        inc = _nominate(project, moderator)
        with pytest.raises(ValidationError) as exc:
            incubation_service.update_incubation(inc.id, {"notes": notes}, actor=moderator)
        assert exc.value.details == {"notes": "must be a string"}
        assert db.session.get(IncubationProject, inc.id).notes == "Strong demo"

    def test_invalid_status(self, project, moderator):
        inc = _nominate(project, moderator)
        with pytest.raises(ValidationError):
            incubation_service.update_incubation(inc.id, {"status": "graduated"}, actor=moderator)

    def test_unknown_id(self, moderator):
        with pytest.raises(NotFoundError):
            incubation_service.update_incubation("missing", {"status": "ready"}, actor=moderator)


class TestList:
    def test_arsenal_ready_filter(self, project, moderator):
        ready = _nominate(project, moderator)
        incubation_service.update_incubation(ready.id, {"maturity_score": 85}, actor=moderator)
        almost = _nominate(project, moderator, target="global")
        incubation_service.update_incubation(almost.id, {"maturity_score": 84}, actor=moderator)

        assert {i.id for i in incubation_service.list_incubations()} == {ready.id, almost.id}
        assert [i.id for i in incubation_service.list_incubations(arsenal_ready=True)] == [ready.id]
        assert [i.id for i in incubation_service.list_incubations(arsenal_ready=False)] == [almost.id]

    def test_includes_project_fields(self, project, moderator):
        _nominate(project, moderator)
        row = incubation_service.list_incubations()[0].to_dict(include_project=True)
        assert row["project_name"] == "Phish Triage Bot"
        assert row["project_description"] == "Automated phishing triage playbooks"
        assert row["arsenal_ready"] is False


class TestIncubationAPI:
    def test_nominate(self, client, project, moderator, auth_headers):
        res = client.post(
            "/api/admin/incubation/nominate",
            json={"project_id": project.id, "target": "regional-emea", "notes": "EMEA demand"},
            headers=auth_headers(moderator),
        )
        assert res.status_code == 201
        body = res.get_json()["incubation"]
        assert body["status"] == "nominated"
        assert body["target"] == "regional-emea"
        assert body["project_name"] == "Phish Triage Bot"

    def test_nominate_missing_project_id(self, client, moderator, auth_headers):
        res = client.post("/api/admin/incubation/nominate", json={"target": "global"},
                          headers=auth_headers(moderator))
        assert res.status_code == 400

    def test_nominate_non_string_project_id(self, client, moderator, auth_headers):
        res = client.post("/api/admin/incubation/nominate",
                          json={"project_id": {"id": "x"}, "target": "global"},
                          headers=auth_headers(moderator))
        assert res.status_code == 400
        assert res.get_json()["error"]["details"] == {"project_id": "required"}

    def test_nominate_unknown_project(self, client, moderator, auth_headers):
        res = client.post("/api/admin/incubation/nominate",
                          json={"project_id": "nope", "target": "global"},
                          headers=auth_headers(moderator))
        assert res.status_code == 404

    def test_patch(self, client, project, moderator, auth_headers):
        inc = _nominate(project, moderator)
        res = client.patch(f"/api/admin/incubation/{inc.id}",
                           json={"status": "ready", "maturity_score": 90},
                           headers=auth_headers(moderator))
        assert res.status_code == 200
        body = res.get_json()["incubation"]
        assert body["status"] == "ready"
        assert body["arsenal_ready"] is True

    def test_patch_empty_body_is_400(self, client, project, moderator, auth_headers):
        inc = _nominate(project, moderator)
        audit_before = AuditLogEntry.query.count()
        res = client.patch(f"/api/admin/incubation/{inc.id}", json={},
                           headers=auth_headers(moderator))
        assert res.status_code == 400
        assert res.get_json()["error"]["message"] == "No updates provided"
        assert AuditLogEntry.query.count() == audit_before

    def test_patch_overflowing_score_is_400(self, client, project, moderator, auth_headers):
        inc = _nominate(project, moderator)
        res = client.patch(f"/api/admin/incubation/{inc.id}",
                           data='{"maturity_score": 1e400}', content_type="application/json",
                           headers=auth_headers(moderator))
        assert res.status_code == 400
        assert res.get_json()["error"]["details"] == {"maturity_score": "not an integer"}
        assert db.session.get(IncubationProject, inc.id).maturity_score == 0

    def test_patch_object_notes_is_400(self, client, project, moderator, auth_headers):
        inc = _nominate(project, moderator)
        res = client.patch(f"/api/admin/incubation/{inc.id}", json={"notes": {"x": 1}},
                           headers=auth_headers(moderator))
        assert res.status_code == 400
        assert res.get_json()["error"]["code"] == "ERR_VALIDATION_INVALID"

    def test_list_with_filter(self, client, project, moderator, auth_headers):
        inc = _nominate(project, moderator)
        incubation_service.update_incubation(inc.id, {"maturity_score": 95}, actor=moderator)
        _nominate(project, moderator, target="global")

        res = client.get("/api/admin/incubation?arsenal_ready=true", headers=auth_headers(moderator))
        assert res.status_code == 200
        assert [i["id"] for i in res.get_json()["incubations"]] == [inc.id]

        res = client.get("/api/admin/incubation", headers=auth_headers(moderator))
        assert len(res.get_json()["incubations"]) == 2

    def test_requires_moderator(self, client, project, author, auth_headers):
        res = client.post("/api/admin/incubation/nominate",
                          json={"project_id": project.id, "target": "global"},
                          headers=auth_headers(author))
        assert res.status_code == 403
        assert IncubationProject.query.count() == 0
