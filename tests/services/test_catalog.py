"""Tests for CatalogService: designations, departments, and whitelists."""

from __future__ import annotations

from orgtree.domain.records import Entity
from orgtree.infrastructure.sql_store import SqlResourceStore
from orgtree.services.catalog import CatalogService, RoleCatalog, by_level
from tests.conftest import ORG, FlakyStore, add_department, add_designation


class TestRoleCatalog:
    def test_all_for_organization(self, store: SqlResourceStore) -> None:
        add_designation(store, "Director")
        add_designation(store, "Elsewhere", org="globex")
        assert [d.title for d in RoleCatalog(store).all_for_organization(ORG)] == ["Director"]

    def test_by_level_is_stable(self, store: SqlResourceStore) -> None:
        for title, level in (("B", 2), ("A1", 1), ("C", 2), ("A2", 1)):
            add_designation(store, title, level)
        ordered = by_level(RoleCatalog(store).all_for_organization(ORG))
        assert [d.title for d in ordered] == ["A1", "A2", "B", "C"]


class TestListDesignations:
    def test_sorted_by_level(self, store: SqlResourceStore) -> None:
        add_designation(store, "Associate", 3)
        add_designation(store, "Director", 1)
        result = CatalogService(store).list_designations(ORG)
        assert result.ok
        assert [i["title"] for i in result.data["items"]] == ["Director", "Associate"]
        assert result.data["count"] == 2

    def test_store_failure(self, store: SqlResourceStore) -> None:
        flaky = FlakyStore(store, fail_list={Entity.DESIGNATION})
        result = CatalogService(flaky).list_designations(ORG)
        assert not result.ok
        assert result.error is not None and result.error.code == "STORE_ERROR"


class TestCreateDesignation:
    def test_organization_wide(self, store: SqlResourceStore) -> None:
        result = CatalogService(store).create_designation(ORG, "Director", level=1)
        assert result.ok
        assert result.data["title"] == "Director"
        assert result.data["whitelisted"] is False
        assert result.data["department_id"] is None

    def test_department_scoped_appends_to_whitelist(self, store: SqlResourceStore) -> None:
        dep = add_department(store, "Ops", ["Manager"])
        result = CatalogService(store).create_designation(
            ORG, "Associate", level=3, reports_to="Manager", department_id=dep.id
        )
        assert result.ok
        assert result.data["whitelisted"] is True
        assert result.data["department_name"] == "Ops"
        assert result.data["reports_to"] == "Manager"
        refreshed = store.get_record(Entity.DEPARTMENT, dep.id, ORG)
        assert refreshed.designations == ["Manager", "Associate"]

    def test_whitelist_not_duplicated(self, store: SqlResourceStore) -> None:
        dep = add_department(store, "Ops", ["associate"])
        result = CatalogService(store).create_designation(ORG, "Associate", department_id=dep.id)
        assert result.ok
        assert result.data["whitelisted"] is False
        assert store.get_record(Entity.DEPARTMENT, dep.id, ORG).designations == ["associate"]

    def test_duplicate_title_rejected(self, store: SqlResourceStore) -> None:
        existing = add_designation(store, "Manager", 2)
        result = CatalogService(store).create_designation(ORG, " MANAGER ")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DUPLICATE_TITLE"
        assert result.error.detail["id"] == existing.id

    def test_existing_title_whitelisted_for_department(self, store: SqlResourceStore) -> None:
        existing = add_designation(store, "Manager", 2)
        dep = add_department(store, "Sales", ["Associate"])
        result = CatalogService(store).create_designation(ORG, "manager", department_id=dep.id)
        assert result.ok
        assert result.data["id"] == existing.id
        assert result.data["existing"] is True
        assert result.data["whitelisted"] is True
        assert any("already exists" in w for w in result.warnings)
        whitelist = store.get_record(Entity.DEPARTMENT, dep.id, ORG).designations
        assert whitelist == ["Associate", "Manager"]
        assert len(store.list_records(Entity.DESIGNATION, ORG)) == 1

    def test_blank_title_is_validation_error(self, store: SqlResourceStore) -> None:
        result = CatalogService(store).create_designation(ORG, "   ")
        assert result.error is not None and result.error.code == "VALIDATION"

    def test_unknown_department(self, store: SqlResourceStore) -> None:
        result = CatalogService(store).create_designation(ORG, "Lead", department_id="DEP-0404")
        assert result.error is not None and result.error.code == "NOT_FOUND"
        assert store.list_records(Entity.DESIGNATION, ORG) == []


class TestDeleteDesignation:
    def test_delete(self, store: SqlResourceStore) -> None:
        dsg = add_designation(store, "Temp")
        result = CatalogService(store).delete_designation(ORG, dsg.id)
        assert result.ok
        assert result.data == {"id": dsg.id}

    def test_delete_missing(self, store: SqlResourceStore) -> None:
        result = CatalogService(store).delete_designation(ORG, "DSG-0404")
        assert result.error is not None and result.error.code == "NOT_FOUND"


class TestDepartments:
    def test_create_dedupes_whitelist(self, store: SqlResourceStore) -> None:
        result = CatalogService(store).create_department(
            ORG, " Ops ", whitelist=["Manager", "manager", "Lead"]
        )
        assert result.ok
        assert result.data["name"] == "Ops"
        assert result.data["designations"] == ["Manager", "Lead"]

    def test_list(self, store: SqlResourceStore) -> None:
        add_department(store, "Ops")
        add_department(store, "Sales")
        result = CatalogService(store).list_departments(ORG)
        assert [d["name"] for d in result.data["items"]] == ["Ops", "Sales"]


class TestWhitelist:
    def test_get(self, store: SqlResourceStore) -> None:
        dep = add_department(store, "Ops", ["Manager"])
        result = CatalogService(store).get_whitelist(ORG, dep.id)
        assert result.data == {"department_id": dep.id, "name": "Ops", "whitelist": ["Manager"]}

    def test_set_replaces_and_dedupes(self, store: SqlResourceStore) -> None:
        dep = add_department(store, "Ops", ["Manager"])
        result = CatalogService(store).set_whitelist(ORG, dep.id, ["Lead", "LEAD", " Analyst "])
        assert result.ok
        assert result.data["whitelist"] == ["Lead", "Analyst"]

    def test_set_missing_department(self, store: SqlResourceStore) -> None:
        result = CatalogService(store).set_whitelist(ORG, "DEP-0404", ["Lead"])
        assert result.error is not None and result.error.code == "NOT_FOUND"
