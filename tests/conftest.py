from datetime import datetime
from decimal import Decimal
from itertools import count

import pytest
from django.utils import timezone

from accounts.models import User
from sales.models import Invoice
from targets.models import Target


@pytest.fixture
def owner_user(db):
    return User.objects.create_user(
        email="owner@test.com",
        password="testpass123",
        first_name="Owner",
        last_name="User",
        role=User.Role.OWNER,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        first_name="Admin",
        last_name="User",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def finance_user(db):
    return User.objects.create_user(
        email="finance@test.com",
        password="testpass123",
        first_name="Finance",
        last_name="User",
        role=User.Role.FINANCE,
    )


@pytest.fixture
def sales_user(db):
    return User.objects.create_user(
        email="sales@test.com",
        password="testpass123",
        first_name="Sales",
        last_name="User",
        role=User.Role.SALES,
    )


@pytest.fixture
def other_sales_user(db):
    return User.objects.create_user(
        email="sales2@test.com",
        password="testpass123",
        first_name="Zoe",
        last_name="Seller",
        role=User.Role.SALES,
    )


@pytest.fixture
def warehouse_user(db):
    return User.objects.create_user(
        email="warehouse@test.com",
        password="testpass123",
        first_name="Warehouse",
        last_name="User",
        role=User.Role.WAREHOUSE,
    )


def _aware(year, month, day, hour=12, minute=0, second=0, microsecond=0):
    """Aware datetime in the project time zone."""
    return timezone.make_aware(
        datetime(year, month, day, hour, minute, second, microsecond),
        timezone.get_current_timezone(),
    )


@pytest.fixture
def aware():
    return _aware


@pytest.fixture
def make_invoice(db):
    """Factory creating invoices; defaults to a PAID invoice."""
    numbers = count(1)

    def _make(amount, when, created_by=None, status=Invoice.Status.PAID):
        return Invoice.objects.create(
            invoice_number=f"INV-TEST-{next(numbers):05d}",
            customer_name="Client Test",
            invoice_date=when,
            status=status,
            total_amount=Decimal(str(amount)),
            created_by=created_by,
        )

    return _make


@pytest.fixture
def make_target(db):
    def _make(owner, period, amount, target_type=Target.TargetType.MONTHLY, is_active=True):
        return Target.objects.create(
            owner=owner,
            target_type=target_type,
            target_period=period,
            target_amount=Decimal(str(amount)),
            is_active=is_active,
        )

    return _make
