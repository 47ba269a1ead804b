"""Tests for HierarchyService role and staff views."""

from __future__ import annotations

from typing import Any

from orgtree.domain.records import Entity
from orgtree.infrastructure.sql_store import SqlResourceStore
from orgtree.services.hierarchy import HierarchyService
from orgtree.services.staffing import StaffingService
from tests.conftest import ORG, FlakyStore, add_department, add_designation, add_staff


def _titles(nodes: list[dict[str, Any]]) -> list[Any]:
    return [(n.get("title") or n.get("name"), _titles(n["children"])) for n in nodes]


class TestRoleTree:
    def test_catalog_forest(self, store: SqlResourceStore) -> None:
        add_designation(store, "CEO", 1)
        add_designation(store, "CTO", 2, "CEO")
        add_designation(store, "Engineer", 3, "cto")
        add_designation(store, "Advisor", 2, "Board")
        result = HierarchyService(store).role_tree(ORG)
        assert result.ok
        assert _titles(result.data["roots"]) == [
            ("CEO", [("CTO", [("Engineer", [])])]),
            ("Advisor", []),
        ]
        assert result.data["count"] == 4

    def test_holders_and_has_children(self, store: SqlResourceStore) -> None:
        add_designation(store, "Manager", 1)
        add_designation(store, "Associate", 2, "Manager")
        add_staff(store, "Max", "manager")
        add_staff(store, "Ann", "Associate")
        add_staff(store, "Abe", "Associate")
        (root,) = HierarchyService(store).role_tree(ORG).data["roots"]
        assert [h["name"] for h in root["holders"]] == ["Max"]
        assert root["has_children"] is True
        child = root["children"][0]
        assert [h["name"] for h in child["holders"]] == ["Ann", "Abe"]
        assert child["has_children"] is False

    def test_department_view_reconciles(self, store: SqlResourceStore) -> None:
        add_designation(store, "Director", 1)
        add_designation(store, "Manager", 2, "Director")
        dep = add_department(store, "Ops", ["Manager", "Associate"])
        result = HierarchyService(store).role_tree(ORG, dep.id)
        # Director is not whitelisted, so Manager becomes a root. Associate is
        # created at the default level 1 and sorts first.
        assert _titles(result.data["roots"]) == [("Associate", []), ("Manager", [])]
        assert len(store.list_records(Entity.DESIGNATION, ORG)) == 3

    def test_expansion(self, store: SqlResourceStore) -> None:
        ceo = add_designation(store, "CEO", 1)
        cto = add_designation(store, "CTO", 2, "CEO")
        add_designation(store, "Dev", 3, "CTO")
        service = HierarchyService(store)

        collapsed = service.role_tree(ORG, expanded=[ceo.id, "stale-id"])
        (root,) = collapsed.data["roots"]
        assert root["expanded"] is True
        assert root["children"][0]["expanded"] is False
        assert collapsed.data["expanded"] == [ceo.id]

        everything = service.role_tree(ORG, expand_all=True)
        assert everything.data["expanded"] == sorted([ceo.id, cto.id])

    def test_store_failure_is_stale_not_error(self, store: SqlResourceStore) -> None:
        flaky = FlakyStore(store, fail_list={Entity.DESIGNATION})
        result = HierarchyService(flaky).role_tree(ORG)
        assert result.ok
        assert result.data["stale"] is True
        assert result.data["roots"] == []
        assert result.warnings

    def test_holder_failure_is_warning(self, store: SqlResourceStore) -> None:
        add_designation(store, "CEO")
        flaky = FlakyStore(store, fail_list={Entity.EMPLOYEE})
        result = HierarchyService(flaky).role_tree(ORG)
        assert result.ok
        assert result.data["roots"][0]["holders"] == []
        assert "holders" in result.warnings[0]

    def test_cycle_is_error(self, store: SqlResourceStore) -> None:
        add_designation(store, "A", 1, "B")
        add_designation(store, "B", 2, "A")
        result = HierarchyService(store).role_tree(ORG)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "HIERARCHY_CYCLE"
        assert sorted(result.error.detail["unplaced"]) == ["a", "b"]


class TestStaffTree:
    def test_single_root(self, store: SqlResourceStore) -> None:
        add_staff(store, "Solo", "CEO")
        (root,) = HierarchyService(store).staff_tree(ORG).data["roots"]
        assert root["name"] == "Solo"
        assert root["children"] == []
        assert root["has_children"] is False

    def test_missing_manager_is_root(self, store: SqlResourceStore) -> None:
        add_staff(store, "Orphan", "Engineer", "EMP-0099")
        result = HierarchyService(store).staff_tree(ORG)
        assert [n["name"] for n in result.data["roots"]] == ["Orphan"]

    def test_department_scope_cuts_cross_department_lines(self, store: SqlResourceStore) -> None:
        ops = add_department(store, "Ops")
        lab = add_department(store, "Lab")
        boss = add_staff(store, "Boss", "Director", department_id=ops.id)
        add_staff(store, "Eve", "Engineer", boss.id, department_id=lab.id)
        add_staff(store, "Fay", "Engineer", boss.id, department_id=ops.id)
        whole = HierarchyService(store).staff_tree(ORG)
        assert _titles(whole.data["roots"]) == [("Boss", [("Eve", []), ("Fay", [])])]
        scoped = HierarchyService(store).staff_tree(ORG, lab.id)
        assert _titles(scoped.data["roots"]) == [("Eve", [])]

    def test_self_manager_is_cycle(self, store: SqlResourceStore) -> None:
        person = add_staff(store, "Loop", "Engineer")
        store.update_record(Entity.EMPLOYEE, person.id, {"reports_to": person.id}, ORG)
        result = HierarchyService(store).staff_tree(ORG)
        assert result.error is not None
        assert result.error.detail["cycle"] == [person.id, person.id]

    def test_depth_bound_from_settings(self, store: SqlResourceStore, settings) -> None:  # type: ignore[no-untyped-def]
        tuned = settings.model_copy(
            update={"hierarchy": settings.hierarchy.model_copy(update={"max_depth": 1})}
        )
        a = add_staff(store, "A", "x")
        b = add_staff(store, "B", "x", a.id)
        add_staff(store, "C", "x", b.id)
        result = HierarchyService(store, tuned).staff_tree(ORG)
        assert result.error is not None
        assert result.error.code == "HIERARCHY_TOO_DEEP"

    def test_store_failure_is_stale(self, store: SqlResourceStore) -> None:
        flaky = FlakyStore(store, fail_list={Entity.EMPLOYEE})
        result = HierarchyService(flaky).staff_tree(ORG)
        assert result.ok
        assert result.data["stale"] is True


class TestDirectReports:
    def test_lists_reports_in_order(self, store: SqlResourceStore) -> None:
        boss = add_staff(store, "Boss", "Director")
        add_staff(store, "Eve", "Engineer", boss.id)
        add_staff(store, "Other", "Engineer")
        add_staff(store, "Fay", "Engineer", boss.id)
        result = HierarchyService(store).direct_reports(ORG, boss.id)
        assert result.data["manager"]["name"] == "Boss"
        assert [p["name"] for p in result.data["items"]] == ["Eve", "Fay"]

    def test_unknown_staff(self, store: SqlResourceStore) -> None:
        result = HierarchyService(store).direct_reports(ORG, "EMP-0404")
        assert result.error is not None and result.error.code == "NOT_FOUND"


class TestDepartmentMembership:
    def test_name_only_record_appears_in_every_view(self, store: SqlResourceStore) -> None:
        add_designation(store, "Manager", 1)
        add_designation(store, "Engineer", 2, "Manager")
        sales = add_department(store, "Sales", ["Manager", "Engineer"])
        lee = add_staff(store, "Lee", "Manager", department_name="Sales")
        add_staff(store, "Ivy", "Engineer", lee.id, department_id=sales.id)

        service = HierarchyService(store)
        staff = service.staff_tree(ORG, sales.id)
        assert staff.data["count"] == 2
        assert _titles(staff.data["roots"]) == [("Lee", [("Ivy", [])])]

        (manager_role,) = service.role_tree(ORG, sales.id).data["roots"]
        assert [h["name"] for h in manager_role["holders"]] == ["Lee"]

        reports = service.direct_reports(ORG, lee.id, sales.id)
        assert [p["name"] for p in reports.data["items"]] == ["Ivy"]

        candidates = StaffingService(store).manager_candidates(ORG, "Engineer", sales.id)
        assert [p["id"] for p in candidates.data["items"]] == [lee.id]

    def test_unknown_department_is_stale(self, store: SqlResourceStore) -> None:
        add_staff(store, "Lee", "Manager")
        result = HierarchyService(store).staff_tree(ORG, "DEP-0404")
        assert result.ok
        assert result.data["stale"] is True
        assert result.warnings
