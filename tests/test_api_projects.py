"""
Project directory API tests.

Covers:
  - List filters (product, theatre, status, search) and ordering
  - Lookup by id or unique name, 404
  - Direct creation: 201, published_at, duplicate name → 400, audit row
  - Field checks on direct creation: text types, column lengths, tag lists
"""

from datetime import datetime, timedelta, timezone

import pytest

from arsenal.models import db
from arsenal.models.audit import AuditLogEntry
from arsenal.models.project import Project
from arsenal.services import project_service


def _project(owner, name, **kw):
    kw.setdefault("status", "published")
    p = Project(name=name, submitted_by=owner.id, **kw)
    db.session.add(p)
    db.session.commit()
    return p


@pytest.fixture()
def catalogue(author):
    now = datetime.now(timezone.utc)
    return {
        "xsoar": _project(author, "SOAR Playbook Pack", description="Incident response playbooks",
                          product="Cortex XSOAR", theatre="NAM",
                          published_at=now - timedelta(days=2)),
        "xdr": _project(author, "XDR Hunting Queries", description="Threat hunting XQL",
                        product="Cortex XDR", theatre="EMEA",
                        published_at=now - timedelta(days=1)),
        "draft": _project(author, "Prisma Policy Lint", description="Policy checks",
                          product="Prisma Cloud", status="draft"),
    }


class TestListProjects:
    def test_defaults_to_published_newest_first(self, client, catalogue):
        res = client.get("/api/projects")
        assert res.status_code == 200
        body = res.get_json()
        assert body["total"] == 2
        assert [p["name"] for p in body["projects"]] == ["XDR Hunting Queries", "SOAR Playbook Pack"]

    def test_filter_by_product_and_theatre(self, client, catalogue):
        res = client.get("/api/projects", query_string={"product": "Cortex XSOAR"})
        assert [p["name"] for p in res.get_json()["projects"]] == ["SOAR Playbook Pack"]

        res = client.get("/api/projects?theatre=EMEA")
        assert [p["name"] for p in res.get_json()["projects"]] == ["XDR Hunting Queries"]

    def test_filter_by_status(self, client, catalogue):
        res = client.get("/api/projects?status=draft")
        assert [p["name"] for p in res.get_json()["projects"]] == ["Prisma Policy Lint"]

    def test_search_is_case_insensitive_on_name_and_description(self, client, catalogue):
        res = client.get("/api/projects?search=hunting")
        assert [p["name"] for p in res.get_json()["projects"]] == ["XDR Hunting Queries"]

        res = client.get("/api/projects?search=PLAYBOOKS")
        assert [p["name"] for p in res.get_json()["projects"]] == ["SOAR Playbook Pack"]

    def test_unpublished_rows_sort_last(self, author, catalogue):
        rows = project_service.list_projects(status=None)
        assert rows[-1].name == "Prisma Policy Lint"


class TestGetProject:
    def test_by_id(self, client, catalogue):
        pid = catalogue["xdr"].id
        res = client.get(f"/api/projects/{pid}")
        assert res.status_code == 200
        assert res.get_json()["project"]["id"] == pid

    def test_by_name(self, client, catalogue):
        res = client.get("/api/projects/SOAR%20Playbook%20Pack")
        assert res.status_code == 200
        assert res.get_json()["project"]["product"] == "Cortex XSOAR"

    def test_missing(self, client):
        res = client.get("/api/projects/does-not-exist")
        assert res.status_code == 404
        assert res.get_json()["error"] == {"message": "Project not found", "code": "ERR_NOT_FOUND"}


class TestCreateProject:
    def test_create_draft(self, client, author, auth_headers):
        res = client.post("/api/projects", json={"name": "Log Parser", "language": "Go"},
                          headers=auth_headers(author))
        assert res.status_code == 201
        body = res.get_json()["project"]
        assert body["status"] == "draft"
        assert body["published_at"] is None
        assert body["submitted_by"] == author.id

        entry = AuditLogEntry.query.filter_by(action="create_project").one()
        assert entry.resource_id == body["id"]

    def test_create_published_sets_published_at(self, client, author, auth_headers):
        res = client.post("/api/projects", json={"name": "Live Tool", "status": "published"},
                          headers=auth_headers(author))
        assert res.get_json()["project"]["published_at"] is not None

    def test_duplicate_name(self, client, author, auth_headers):
        client.post("/api/projects", json={"name": "Twin"}, headers=auth_headers(author))
        res = client.post("/api/projects", json={"name": "Twin"}, headers=auth_headers(author))
        assert res.status_code == 400
        assert res.get_json()["error"]["message"] == "Project name already exists"
        assert Project.query.filter_by(name="Twin").count() == 1

    def test_name_required(self, client, author, auth_headers):
        res = client.post("/api/projects", json={"description": "nameless"},
                          headers=auth_headers(author))
        assert res.status_code == 400
        assert "name" in res.get_json()["error"]["details"]

    def test_invalid_product(self, client, author, auth_headers):
        res = client.post("/api/projects", json={"name": "X", "product": "Cortex Everything"},
                          headers=auth_headers(author))
        assert res.status_code == 400

    @pytest.mark.parametrize("field, value", [
        ("description", {"text": "x"}),
        ("usecase", ["demo"]),
        ("language", "L" * 51),
        ("repo", 42),
    ])
    def test_text_fields_are_checked(self, client, author, auth_headers, field, value):
        res = client.post("/api/projects", json={"name": "Typed", field: value},
                          headers=auth_headers(author))
        assert res.status_code == 400
        assert field in res.get_json()["error"]["details"]
        assert Project.query.filter_by(name="Typed").count() == 0

    def test_tags_must_be_strings(self, client, author, auth_headers):
        res = client.post("/api/projects", json={"name": "Tagged", "tags": [{"a": 1}]},
                          headers=auth_headers(author))
        assert res.status_code == 400
        assert "tags" in res.get_json()["error"]["details"]

    def test_requires_identity(self, client):
        res = client.post("/api/projects", json={"name": "Anonymous"})
        assert res.status_code == 401
