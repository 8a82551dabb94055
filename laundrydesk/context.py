# laundrydesk/context.py
"""Per-request operator context, passed explicitly into service functions."""
from dataclasses import dataclass

ROLE_PERMISSIONS = {
    "admin": {
        "canManageUsers", "canEditPrices", "canViewAllBranches", "canManageOrders",
        "canCreateOrders", "canViewReports", "canManageCash", "canManageCustomers",
        "canManageExpenses",
    },
    "manager": {
        "canManageOrders", "canCreateOrders", "canViewReports", "canManageCash",
        "canManageCustomers", "canManageExpenses",
    },
    "cashier": {"canCreateOrders", "canManageCash"},
    "processor": {"canManageOrders"},
}


@dataclass(frozen=True)
class RequestContext:
    user_id: int
    username: str
    role: str
    branch_id: int | None = None

    @classmethod
    def for_user(cls, user):
        return cls(user_id=user.id, username=user.username, role=user.role, branch_id=user.branch_id)

    def can(self, permission: str) -> bool:
        return permission in ROLE_PERMISSIONS.get(self.role, set())

    @property
    def sees_all_branches(self) -> bool:
        return self.can("canViewAllBranches")

    def sees_branch(self, branch_id) -> bool:
        if self.sees_all_branches or self.branch_id is None or branch_id is None:
            return True
        return branch_id == self.branch_id

    def scope(self, query, model):
        """Restrict a query to the operator's branch (legacy rows without a branch stay visible)."""
        if self.sees_all_branches or self.branch_id is None:
            return query
        return query.filter((model.branch_id == self.branch_id) | (model.branch_id.is_(None)))

    def effective_branch_id(self, requested=None):
        if self.sees_all_branches:
            return requested or self.branch_id
        return self.branch_id
