"""Tests for tenant-scoped admin endpoints under /api/admin"""

import logging

from kingdom_access.models.role import Role
from kingdom_access.models.tenant import TenantStatus
from tests.conftest import headers_for


class TestDashboardMetrics:
    """Tests for GET /api/admin/dashboard/metrics"""

    def test_admin_gets_own_tenant(self, client, admin_headers, participant, other_participant):
        response = client.get("/api/admin/dashboard/metrics", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["tenant_id"] == "church-1"
        assert data["total_users"] == 2  # org admin + participant

    def test_tenant_hint_ignored_for_admin(self, client, admin_headers, other_participant):
        response = client.get(
            "/api/admin/dashboard/metrics",
            headers=admin_headers,
            params={"tenant_id": "church-7"},
        )

        assert response.status_code == 200
        assert response.json()["tenant_id"] == "church-1"

    def test_leader_forbidden(self, client, leader_headers):
        response = client.get("/api/admin/dashboard/metrics", headers=leader_headers)

        assert response.status_code == 403
        assert response.json()["required_role"] == "ORG_ADMIN"
        assert response.json()["user_role"] == "ORG_LEADER"

    def test_super_admin_with_hint(self, client, super_admin_headers, other_participant):
        response = client.get(
            "/api/admin/dashboard/metrics",
            headers=super_admin_headers,
            params={"tenant_id": "church-7"},
        )

        assert response.status_code == 200
        assert response.json()["tenant_id"] == "church-7"
        assert response.json()["total_users"] == 1

    def test_super_admin_unknown_hint(self, client, super_admin_headers):
        response = client.get(
            "/api/admin/dashboard/metrics",
            headers=super_admin_headers,
            params={"tenant_id": "church-404"},
        )

        assert response.status_code == 404


class TestDashboardUsers:
    """Tests for GET /api/admin/dashboard/users"""

    def test_leader_lists_own_tenant(self, client, leader_headers, participant, other_participant):
        response = client.get("/api/admin/dashboard/users", headers=leader_headers)

        assert response.status_code == 200
        ids = {u["id"] for u in response.json()}
        assert ids == {"leader", "participant"}

    def test_tenant_hint_cannot_reach_other_tenant(
        self, client, leader_headers, participant, other_participant
    ):
        response = client.get(
            "/api/admin/dashboard/users",
            headers=leader_headers,
            params={"tenant_id": "church-7"},
        )

        assert response.status_code == 200
        assert all(u["tenant_id"] == "church-1" for u in response.json())

    def test_participant_lacks_permission(self, client, participant_headers):
        response = client.get("/api/admin/dashboard/users", headers=participant_headers)

        assert response.status_code == 403
        assert response.json()["reason"] == "insufficient_permission"
        assert response.json()["required_permission"] == "users_view"


class TestUpdateUserRole:
    """Tests for PUT /api/admin/users/{user_id}/role"""

    def test_admin_promotes_participant(self, client, admin_headers, participant):
        response = client.put(
            f"/api/admin/users/{participant.id}/role",
            headers=admin_headers,
            json={"role": "ORG_LEADER"},
        )

        assert response.status_code == 200
        assert response.json()["role"] == "ORG_LEADER"

    def test_cannot_assign_own_level(self, client, admin_headers, participant):
        response = client.put(
            f"/api/admin/users/{participant.id}/role",
            headers=admin_headers,
            json={"role": "ORG_ADMIN"},
        )

        assert response.status_code == 403
        assert response.json()["reason"] == "cannot_manage_user"

    def test_cannot_change_higher_role(self, client, admin_headers, owner):
        response = client.put(
            f"/api/admin/users/{owner.id}/role",
            headers=admin_headers,
            json={"role": "PARTICIPANT"},
        )

        assert response.status_code == 403

    def test_cannot_change_own_role(self, client, owner, owner_headers):
        response = client.put(
            f"/api/admin/users/{owner.id}/role",
            headers=owner_headers,
            json={"role": "ORG_ADMIN"},
        )

        assert response.status_code == 403

    def test_other_tenant_user_not_found(self, client, owner_headers, other_participant):
        response = client.put(
            f"/api/admin/users/{other_participant.id}/role",
            headers=owner_headers,
            json={"role": "ORG_LEADER"},
        )

        assert response.status_code == 404

    def test_leader_lacks_users_manage(self, client, leader_headers, participant):
        response = client.put(
            f"/api/admin/users/{participant.id}/role",
            headers=leader_headers,
            json={"role": "ORG_LEADER"},
        )

        assert response.status_code == 403
        assert response.json()["required_permission"] == "users_manage"

    def test_super_admin_promotes_to_owner(self, client, super_admin_headers, other_participant):
        response = client.put(
            f"/api/admin/users/{other_participant.id}/role",
            headers=super_admin_headers,
            json={"role": "ORG_OWNER"},
        )

        assert response.status_code == 200
        assert response.json()["role"] == "ORG_OWNER"

    def test_role_change_audit_records_view_as(
        self, client, super_admin_headers, participant, caplog
    ):
        caplog.set_level(logging.INFO, logger="kingdom_access.services.user_admin_service")
        client.post(
            "/api/super-admin/view-as",
            headers=super_admin_headers,
            json={"target_role": "ORG_OWNER", "target_tenant_id": "church-1"},
        )

        response = client.put(
            f"/api/admin/users/{participant.id}/role",
            headers=super_admin_headers,
            json={"role": "ORG_LEADER"},
        )

        assert response.status_code == 200
        audit = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Role changed")]
        assert len(audit) == 1
        assert "by=super-admin" in audit[0]
        assert "real_role=SUPER_ADMIN" in audit[0]
        assert "effective_role=ORG_OWNER" in audit[0]
        assert "impersonating=True" in audit[0]

    def test_tenant_role_requires_tenant(self, client, db_session, super_admin_headers):
        from tests.conftest import make_user

        other_super = make_user(db_session, "other-super", Role.SUPER_ADMIN, None)

        response = client.put(
            f"/api/admin/users/{other_super.id}/role",
            headers=super_admin_headers,
            json={"role": "ORG_ADMIN"},
        )

        assert response.status_code == 400


class TestTransferTenant:
    """Tests for PUT /api/admin/users/{user_id}/tenant"""

    def test_super_admin_transfers_user(self, client, super_admin_headers, participant, church_7):
        response = client.put(
            f"/api/admin/users/{participant.id}/tenant",
            headers=super_admin_headers,
            json={"tenant_id": "church-7"},
        )

        assert response.status_code == 200
        assert response.json()["tenant_id"] == "church-7"

    def test_transfer_audit_records_real_role(
        self, client, super_admin_headers, participant, church_7, caplog
    ):
        caplog.set_level(logging.INFO, logger="kingdom_access.services.user_admin_service")

        client.put(
            f"/api/admin/users/{participant.id}/tenant",
            headers=super_admin_headers,
            json={"tenant_id": "church-7"},
        )

        audit = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Tenant transfer")]
        assert len(audit) == 1
        assert "real_role=SUPER_ADMIN" in audit[0]
        assert "impersonating=False" in audit[0]

    def test_inactive_destination_rejected(
        self, client, super_admin_headers, participant, inactive_church
    ):
        response = client.put(
            f"/api/admin/users/{participant.id}/tenant",
            headers=super_admin_headers,
            json={"tenant_id": inactive_church.id},
        )

        assert response.status_code == 400

    def test_owner_cannot_transfer(self, client, owner_headers, participant, church_7):
        response = client.put(
            f"/api/admin/users/{participant.id}/tenant",
            headers=owner_headers,
            json={"tenant_id": "church-7"},
        )

        assert response.status_code == 403
        assert response.json()["required_role"] == "SUPER_ADMIN"


class TestPlatformRoutes:
    """Tests for /api/super-admin organization and metrics endpoints"""

    def test_platform_metrics(self, client, super_admin_headers, participant, other_participant):
        response = client.get("/api/super-admin/platform-metrics", headers=super_admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_tenants"] == 2
        assert data["total_users"] == 2
        assert data["failed_tenant_ids"] == []
        assert {t["tenant_id"] for t in data["top_tenants"]} == {"church-1", "church-7"}

    def test_platform_metrics_forbidden_for_owner(self, client, owner_headers):
        response = client.get("/api/super-admin/platform-metrics", headers=owner_headers)

        assert response.status_code == 403
        assert response.json()["required_role"] == "SUPER_ADMIN"

    def test_platform_metrics_forbidden_while_viewing_as(
        self, client, super_admin_headers, church_1
    ):
        client.post(
            "/api/super-admin/view-as",
            headers=super_admin_headers,
            json={"target_role": "ORG_ADMIN", "target_tenant_id": "church-1"},
        )

        response = client.get("/api/super-admin/platform-metrics", headers=super_admin_headers)
        assert response.status_code == 403
        assert response.json()["user_role"] == "ORG_ADMIN"

    def test_list_organizations(self, client, super_admin_headers, church_1, church_7):
        response = client.get("/api/super-admin/organizations", headers=super_admin_headers)

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == ["church-1", "church-7"]

    def test_organizations_overview(self, client, super_admin_headers, participant, church_7):
        response = client.get(
            "/api/super-admin/organizations/overview", headers=super_admin_headers
        )

        assert response.status_code == 200
        by_id = {t["id"]: t for t in response.json()}
        assert by_id["church-1"]["metrics"]["total_users"] == 1
        assert by_id["church-7"]["metrics"]["total_users"] == 0

    def test_deactivate_organization(self, client, db_session, super_admin_headers, church_7):
        response = client.patch(
            "/api/super-admin/organizations/church-7/status",
            headers=super_admin_headers,
            json={"status": "INACTIVE"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["organization"]["status"] == "INACTIVE"
        assert data["message"] == "Organization inactive successfully"
        db_session.refresh(church_7)
        assert church_7.status == TenantStatus.INACTIVE

    def test_invalid_status_rejected(self, client, super_admin_headers, church_7):
        response = client.patch(
            "/api/super-admin/organizations/church-7/status",
            headers=super_admin_headers,
            json={"status": "DELETED"},
        )

        assert response.status_code == 422

    def test_status_change_forbidden_for_owner(self, client, owner, church_7):
        response = client.patch(
            "/api/super-admin/organizations/church-7/status",
            headers=headers_for(owner),
            json={"status": "INACTIVE"},
        )

        assert response.status_code == 403
