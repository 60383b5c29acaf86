import pytest
from django.core.exceptions import ValidationError

from targets.models import Target


@pytest.mark.django_db
def test_clean_rejects_period_not_matching_type(sales_user):
    target = Target(
        owner=sales_user,
        target_type=Target.TargetType.YEARLY,
        target_period="2025-07",
        target_amount=100,
    )
    with pytest.raises(ValidationError) as excinfo:
        target.clean()
    assert "target_period" in excinfo.value.message_dict


@pytest.mark.django_db
def test_clean_rejects_duplicate_active_company_target(make_target):
    make_target(None, "2025", 100, target_type=Target.TargetType.YEARLY)
    duplicate = Target(
        owner=None,
        target_type=Target.TargetType.YEARLY,
        target_period="2025",
        target_amount=200,
    )
    with pytest.raises(ValidationError):
        duplicate.clean()


@pytest.mark.django_db
def test_clean_allows_inactive_duplicate(make_target, sales_user):
    make_target(sales_user, "2025-07", 100)
    archived = Target(
        owner=sales_user,
        target_type=Target.TargetType.MONTHLY,
        target_period="2025-07",
        target_amount=200,
        is_active=False,
    )
    archived.clean()


@pytest.mark.django_db
def test_str_and_company_flag(make_target, sales_user):
    assert make_target(None, "2025", 1, target_type=Target.TargetType.YEARLY).is_company_wide
    personal = make_target(sales_user, "2025-07", 1)
    assert not personal.is_company_wide
    assert str(personal) == "Sales User - 2025-07 (Mensuel)"
