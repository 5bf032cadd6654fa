"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
Authentication lives with the session provider; this table only holds
profile data and the role.
"""

from typing import Optional

from db import executor
from models.filters import UserFilter
from models.pagination import PageRequest, PageResult
from repositories.base import Repository, build_where
from repositories.pagination import PagedQuery, paginate

USER_LISTING = PagedQuery(
    select="id, name, email, role, created_at, updated_at",
    source="users",
    sortable={
        "id": "id",
        "name": "name",
        "email": "email",
        "role": "role",
        "createdAt": "created_at",
    },
    default_order="createdAt",
    default_dir="DESC",
    tiebreaker="id",
)


class UserRepository(Repository):
    """Repository for CRUD operations on the users table."""

    table = "users"
    entity = "User"
    columns = frozenset({"id", "name", "email", "role", "phone", "address", "created_at", "updated_at"})
    writable = frozenset({"name", "email", "role", "phone", "address"})

    def paginate(self, filters: Optional[UserFilter], page: PageRequest) -> PageResult:
        where = build_where((filters or UserFilter()).predicates())
        return paginate(USER_LISTING, where, page, transform=self._to_record)

    def get_profile(self, user_id: int) -> Optional[dict]:
        """
        Fetch the editable profile of a user.

        Returns:
            Dict with 'id', 'name', 'email', 'phone', 'address' or None.
        """
        sql = """
            SELECT id, name, email, COALESCE(phone, '') AS phone, COALESCE(address, '') AS address
            FROM users WHERE id = %s;
        """
        return self._to_record(executor.fetch_one(sql, (user_id,)))

    def get_by_email(self, email: str) -> Optional[dict]:
        sql = "SELECT id, name, email, role FROM users WHERE LOWER(email) = LOWER(%s);"
        return self._to_record(executor.fetch_one(sql, (email,)))
