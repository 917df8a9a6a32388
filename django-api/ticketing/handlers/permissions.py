"""Role gates for the core operations.

Roles are Django auth groups. Superusers and members of the ``admin``
group pass every role check.
"""

from rest_framework.permissions import BasePermission

ADMIN = "admin"
CASHIER = "cashier"
SCANNER = "scanner"

ROLES = (ADMIN, CASHIER, SCANNER)


def has_role(user, role: str) -> bool:
    if user is None or not user.is_authenticated or not user.is_active:
        return False
    if user.is_superuser:
        return True
    groups = set(user.groups.values_list("name", flat=True))
    return role in groups or ADMIN in groups


class RolePermission(BasePermission):
    role = ADMIN
    message = "You do not have the role required for this operation."

    def has_permission(self, request, view) -> bool:
        return has_role(request.user, self.role)


class IsAdmin(RolePermission):
    role = ADMIN


class IsCashier(RolePermission):
    role = CASHIER


class IsScanner(RolePermission):
    role = SCANNER
