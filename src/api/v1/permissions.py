"""Custom DRF permissions for the sales back-office."""
from rest_framework.permissions import BasePermission


class IsTargetManager(BasePermission):
    """Allow access to users who manage targets (OWNER/ADMIN/FINANCE or superuser)."""

    message = "Acces reserve aux responsables des objectifs commerciaux."

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "can_manage_targets", False)
        )


class IsSalesOrTargetManager(BasePermission):
    """Allow salespeople (own data) and target managers."""

    message = "Acces reserve aux commerciaux et aux responsables."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "can_manage_targets", False) or getattr(user, "is_sales", False)
