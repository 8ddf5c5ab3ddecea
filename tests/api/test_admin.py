"""
Tests for the administrator endpoints and archive views.
"""

from decimal import Decimal

from church_ledger.models.archive import MonthlyArchive

from conftest import headers_for, make_branch, make_fund


def setup_admin(db_session):
    admin = make_branch(db_session, "Head Office", is_admin=True)
    db_session.commit()
    return admin


def post_tithe(client, branch, amount):
    return client.post("/entries", headers=headers_for(branch), json={
        "kind": "TITHE", "amount": str(amount), "person_name": "Maria",
    })


class TestAdminAccess:

    def test_non_admin_gets_403(self, client, db_session):
        branch = make_branch(db_session, "Central")
        db_session.commit()

        response = client.get("/admin/overview", headers=headers_for(branch))

        assert response.status_code == 403

    def test_missing_header_gets_401(self, client):
        assert client.get("/admin/branches").status_code == 401


class TestBranchAdmin:

    def test_create_branch_provisions_general_cash(self, client, db_session):
        admin = setup_admin(db_session)

        response = client.post("/admin/branches", headers=headers_for(admin), json={
            "name": "Central", "password": "secret1",
        })

        assert response.status_code == 201
        branch_id = response.json()["id"]
        funds = client.get(
            "/funds", headers={"X-Branch-Id": str(branch_id)}
        ).json()
        assert [f["name"] for f in funds] == ["General Cash"]

    def test_create_duplicate_branch_is_400(self, client, db_session):
        admin = setup_admin(db_session)
        make_branch(db_session, "Central")
        db_session.commit()

        response = client.post("/admin/branches", headers=headers_for(admin), json={
            "name": "Central", "password": "secret1",
        })

        assert response.status_code == 400

    def test_rename_and_list(self, client, db_session):
        admin = setup_admin(db_session)
        branch = make_branch(db_session, "Central")
        db_session.commit()
        headers = headers_for(admin)

        response = client.patch(
            f"/admin/branches/{branch.id}", headers=headers,
            json={"name": "Central Church"},
        )
        assert response.status_code == 200

        names = [b["name"] for b in client.get("/admin/branches", headers=headers).json()]
        assert names == ["Central Church"]

    def test_password_change(self, client, db_session):
        admin = setup_admin(db_session)
        branch = make_branch(db_session, "Central", password="secret1")
        db_session.commit()
        url = f"/admin/branches/{branch.id}/password"

        wrong = client.put(url, headers=headers_for(admin), json={
            "current_password": "nope", "new_password": "better2",
        })
        assert wrong.status_code == 401

        ok = client.put(url, headers=headers_for(admin), json={
            "current_password": "secret1", "new_password": "better2",
        })
        assert ok.status_code == 200
        assert ok.json() == {"success": True}


class TestResetAndReconcile:

    def test_reset_zeroes_branch(self, client, db_session):
        admin = setup_admin(db_session)
        branch = make_branch(db_session, "Central")
        db_session.commit()
        post_tithe(client, branch, 40)

        response = client.post(
            f"/admin/branches/{branch.id}/reset", headers=headers_for(admin)
        )

        assert response.status_code == 200
        assert response.json()["entries_created"] == 1
        balance = client.get("/balance", headers=headers_for(branch)).json()
        assert Decimal(balance["balance"]) == Decimal("0.00")

        reconciliation = client.get(
            f"/admin/branches/{branch.id}/reconciliation",
            headers=headers_for(admin),
        ).json()
        assert reconciliation["is_consistent"] is True

    def test_reset_unknown_branch_is_404(self, client, db_session):
        admin = setup_admin(db_session)

        response = client.post("/admin/branches/9999/reset", headers=headers_for(admin))

        assert response.status_code == 404


class TestMonthlyArchive:

    def test_run_archive_then_refuse_repeat(self, client, db_session):
        admin = setup_admin(db_session)
        central = make_branch(db_session, "Central")
        fund = make_fund(db_session, central, "Missions")
        db_session.commit()
        post_tithe(client, central, 50)
        client.post("/entries", headers=headers_for(central), json={
            "kind": "DEPOSIT", "amount": "70", "person_name": "Maria",
            "fund_id": fund.id,
        })

        response = client.post("/admin/monthly-archive", headers=headers_for(admin))

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["archive_ids"]) == 1

        archive = db_session.get(MonthlyArchive, data["archive_ids"][0])
        assert archive.final_balance == Decimal("120.00")
        balance = client.get("/balance", headers=headers_for(central)).json()
        assert Decimal(balance["balance"]) == Decimal("0.00")

        again = client.post("/admin/monthly-archive", headers=headers_for(admin))
        assert again.status_code == 400

    def test_overview(self, client, db_session):
        admin = setup_admin(db_session)
        central = make_branch(db_session, "Central")
        db_session.commit()
        post_tithe(client, central, 30)

        data = client.get("/admin/overview", headers=headers_for(admin)).json()

        assert data["branches"][0]["name"] == "Central"
        assert Decimal(data["total_balance"]) == Decimal("30.00")
        totals = {t["kind"]: Decimal(t["total"]) for t in data["type_totals"]}
        assert totals["TITHE"] == Decimal("30.00")

    def test_branch_report_html(self, client, db_session):
        admin = setup_admin(db_session)
        central = make_branch(db_session, "Central")
        db_session.commit()
        post_tithe(client, central, 1234.5)
        month = client.post(
            "/admin/monthly-archive", headers=headers_for(admin)
        ).json()["month_year"]

        response = client.get(
            "/admin/reports/branches", headers=headers_for(admin),
            params={"month": month},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Central" in response.text
        assert "1,234.50" in response.text

    def test_branch_report_bad_month_is_400(self, client, db_session):
        admin = setup_admin(db_session)

        response = client.get(
            "/admin/reports/branches", headers=headers_for(admin),
            params={"month": "March"},
        )

        assert response.status_code == 400
