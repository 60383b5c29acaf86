from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError
from rest_framework.test import APIClient

from targets.models import Target

ATTAINMENT_URL = "/api/v1/targets/attainment/"
COMPANY_URL = "/api/v1/company-targets/attainment/"
EXPORT_URL = "/api/v1/targets/attainment/export/"
TARGETS_URL = "/api/v1/targets/"


@pytest.fixture
def api_client():
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ────────────────────────────────────────────────────────────
# Attainment
# ────────────────────────────────────────────────────────────

@pytest.mark.django_db
def test_attainment_requires_authentication(api_client):
    response = api_client.get(ATTAINMENT_URL)
    assert response.status_code == 401


@pytest.mark.django_db
def test_sales_user_sees_own_attainment(make_target, make_invoice, sales_user, other_sales_user, aware):
    make_target(sales_user, "2025-07", 3000000)
    make_target(other_sales_user, "2025-07", 1000)
    make_invoice(1500000, aware(2025, 7, 15), created_by=sales_user)

    response = _client_for(sales_user).get(ATTAINMENT_URL)

    assert response.status_code == 200, response.content
    body = response.json()
    assert body["success"] is True
    assert body["skipped"] == []
    assert len(body["data"]) == 1
    row = body["data"][0]
    assert row["owner_id"] == str(sales_user.pk)
    assert row["period"] == "2025-07"
    assert Decimal(str(row["achieved_amount"])) == Decimal("1500000")
    assert row["percentage"] == pytest.approx(50.0)


@pytest.mark.django_db
def test_large_paid_totals_are_serialized(sales_user, make_target, make_invoice, aware):
    make_target(sales_user, "2025-07", 1000)
    make_invoice("90000000000000.00", aware(2025, 7, 3), created_by=sales_user)
    make_invoice("90000000000000.00", aware(2025, 7, 4), created_by=sales_user)

    response = _client_for(sales_user).get(ATTAINMENT_URL)

    assert response.status_code == 200, response.content
    row = response.json()["data"][0]
    assert Decimal(str(row["achieved_amount"])) == Decimal("180000000000000")
    assert row["invoice_count"] == 2


@pytest.mark.django_db
def test_sales_user_cannot_read_another_user(sales_user, other_sales_user):
    response = _client_for(sales_user).get(ATTAINMENT_URL, {"userId": str(other_sales_user.pk)})

    assert response.status_code == 403
    assert response.json()["success"] is False


@pytest.mark.django_db
def test_warehouse_user_is_denied(warehouse_user):
    response = _client_for(warehouse_user).get(ATTAINMENT_URL)
    assert response.status_code == 403


@pytest.mark.django_db
def test_manager_sees_every_eligible_user(admin_user, make_target, sales_user, other_sales_user):
    make_target(sales_user, "2025-07", 100)
    make_target(other_sales_user, "2025-07", 100)
    make_target(admin_user, "2025-07", 100)

    response = _client_for(admin_user).get(ATTAINMENT_URL)

    assert response.status_code == 200
    owners = {row["owner_id"] for row in response.json()["data"]}
    assert owners == {str(sales_user.pk), str(other_sales_user.pk)}


@pytest.mark.django_db
def test_manager_can_filter_one_user(finance_user, make_target, sales_user, other_sales_user):
    make_target(sales_user, "2025-07", 100)
    make_target(other_sales_user, "2025-07", 100)

    response = _client_for(finance_user).get(ATTAINMENT_URL, {"userId": str(other_sales_user.pk)})

    assert response.status_code == 200
    assert [row["owner_id"] for row in response.json()["data"]] == [str(other_sales_user.pk)]


@pytest.mark.django_db
def test_unknown_user_is_not_found(owner_user):
    response = _client_for(owner_user).get(
        ATTAINMENT_URL, {"userId": "8f14e45f-ceea-467f-a0e6-ae41c5b3b5b1"},
    )
    assert response.status_code == 404


@pytest.mark.django_db
def test_user_without_targets_gets_empty_data(sales_user):
    response = _client_for(sales_user).get(ATTAINMENT_URL)

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [], "skipped": []}


@pytest.mark.django_db
@pytest.mark.parametrize("params", [{"targetType": "WEEKLY"}, {"periods": "0"}, {"periods": "abc"}])
def test_invalid_query_is_rejected(sales_user, params):
    response = _client_for(sales_user).get(ATTAINMENT_URL, params)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]


@pytest.mark.django_db
def test_malformed_period_is_reported_as_skipped(sales_user, make_target):
    make_target(sales_user, "2025-13", 100)
    make_target(sales_user, "2025-06", 100)

    body = _client_for(sales_user).get(ATTAINMENT_URL).json()

    assert [row["period"] for row in body["data"]] == ["2025-06"]
    assert body["skipped"][0]["period"] == "2025-13"


@pytest.mark.django_db
def test_store_failure_returns_500_envelope(sales_user, make_target):
    make_target(sales_user, "2025-07", 100)

    with mock.patch(
        "django.db.models.query.QuerySet.aggregate",
        side_effect=DatabaseError("connexion perdue"),
    ):
        response = _client_for(sales_user).get(ATTAINMENT_URL)

    assert response.status_code == 500
    assert response.json()["success"] is False


@pytest.mark.django_db
def test_company_attainment_is_manager_only(sales_user, admin_user, make_target, make_invoice, aware):
    make_target(None, "2025-Q3", 1000, target_type=Target.TargetType.QUARTERLY)
    make_invoice(250, aware(2025, 8, 1), created_by=sales_user)
    make_invoice(250, aware(2025, 9, 30, 23, 30), created_by=None)

    assert _client_for(sales_user).get(COMPANY_URL).status_code == 403

    response = _client_for(admin_user).get(COMPANY_URL, {"targetType": "QUARTERLY"})
    assert response.status_code == 200
    row = response.json()["data"][0]
    assert row["owner_id"] is None
    assert row["percentage"] == pytest.approx(50.0)


# ────────────────────────────────────────────────────────────
# Export
# ────────────────────────────────────────────────────────────

@pytest.mark.django_db
def test_csv_export(sales_user, make_target):
    make_target(sales_user, "2025-07", 100)

    response = _client_for(sales_user).get(EXPORT_URL, {"file_format": "csv"})

    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/csv")
    content = response.content.decode("utf-8-sig")
    assert content.splitlines()[0].startswith("Commercial,Type,Periode")
    assert "2025-07" in content


@pytest.mark.django_db
def test_xlsx_export(admin_user, sales_user, make_target):
    make_target(sales_user, "2025-07", 100)

    response = _client_for(admin_user).get(EXPORT_URL, {"file_format": "xlsx"})

    assert response.status_code == 200
    assert response["Content-Disposition"].endswith('.xlsx"')
    assert response.content[:2] == b"PK"


@pytest.mark.django_db
def test_export_rejects_unknown_format(sales_user):
    response = _client_for(sales_user).get(EXPORT_URL, {"file_format": "pdf"})
    assert response.status_code == 400


# ────────────────────────────────────────────────────────────
# Target CRUD
# ────────────────────────────────────────────────────────────

@pytest.mark.django_db
def test_manager_creates_target(admin_user, sales_user):
    response = _client_for(admin_user).post(
        TARGETS_URL,
        {
            "owner": str(sales_user.pk),
            "target_type": "MONTHLY",
            "target_period": "2025-09",
            "target_amount": "2500000.00",
        },
        format="json",
    )

    assert response.status_code == 201, response.content
    target = Target.objects.get(pk=response.json()["id"])
    assert target.owner == sales_user
    assert target.is_active


@pytest.mark.django_db
def test_company_target_without_owner(admin_user):
    response = _client_for(admin_user).post(
        TARGETS_URL,
        {"target_type": "YEARLY", "target_period": "2026", "target_amount": "1000"},
        format="json",
    )

    assert response.status_code == 201, response.content
    assert response.json()["is_company_wide"] is True


@pytest.mark.django_db
def test_create_rejects_bad_period(admin_user, sales_user):
    response = _client_for(admin_user).post(
        TARGETS_URL,
        {
            "owner": str(sales_user.pk),
            "target_type": "QUARTERLY",
            "target_period": "2025-07",
            "target_amount": "100",
        },
        format="json",
    )

    assert response.status_code == 400
    assert "target_period" in response.json()


@pytest.mark.django_db
def test_create_rejects_duplicate_active_target(admin_user, sales_user, make_target):
    make_target(sales_user, "2025-09", 100)

    response = _client_for(admin_user).post(
        TARGETS_URL,
        {
            "owner": str(sales_user.pk),
            "target_type": "MONTHLY",
            "target_period": "2025-09",
            "target_amount": "200",
        },
        format="json",
    )

    assert response.status_code == 400


@pytest.mark.django_db
def test_sales_user_cannot_manage_targets(sales_user):
    client = _client_for(sales_user)
    assert client.get(TARGETS_URL).status_code == 403
    assert client.post(TARGETS_URL, {}, format="json").status_code == 403


@pytest.mark.django_db
def test_list_filters(admin_user, sales_user, make_target):
    make_target(sales_user, "2025-07", 100)
    make_target(sales_user, "2025-Q3", 100, target_type=Target.TargetType.QUARTERLY)
    make_target(None, "2025-07", 100)

    client = _client_for(admin_user)
    quarterly = client.get(TARGETS_URL, {"target_type": "QUARTERLY"}).json()
    company = client.get(TARGETS_URL, {"company": "true"}).json()

    assert [t["target_period"] for t in quarterly["results"]] == ["2025-Q3"]
    assert [t["owner"] for t in company["results"]] == [None]


@pytest.mark.django_db
def test_toggle_flips_active_flag(admin_user, sales_user, make_target):
    target = make_target(sales_user, "2025-07", 100)
    client = _client_for(admin_user)

    response = client.post(f"{TARGETS_URL}{target.pk}/toggle/")
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = client.post(f"{TARGETS_URL}{target.pk}/toggle/")
    assert response.json()["is_active"] is True


@pytest.mark.django_db
def test_toggle_refuses_second_active_target(admin_user, sales_user, make_target):
    make_target(sales_user, "2025-07", 100)
    inactive = make_target(sales_user, "2025-07", 200, is_active=False)

    response = _client_for(admin_user).post(f"{TARGETS_URL}{inactive.pk}/toggle/")

    assert response.status_code == 400
    inactive.refresh_from_db()
    assert inactive.is_active is False


@pytest.mark.django_db
def test_eligible_users(admin_user, sales_user, warehouse_user):
    response = _client_for(admin_user).get(f"{TARGETS_URL}eligible-users/")

    assert response.status_code == 200
    assert [u["email"] for u in response.json()] == [sales_user.email]


@pytest.mark.django_db
def test_current_period_for_any_authenticated_user(sales_user):
    client = _client_for(sales_user)

    response = client.get(f"{TARGETS_URL}current-period/", {"targetType": "QUARTERLY"})
    assert response.status_code == 200
    assert "-Q" in response.json()["target_period"]

    assert client.get(f"{TARGETS_URL}current-period/", {"targetType": "DAILY"}).status_code == 400
