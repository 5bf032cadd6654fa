"""
services/user_service.py
------------------------
User administration and profile management.
"""

from typing import Mapping, Optional

from config import USER_ROLES
from exceptions import NotFoundError, ValidationError
from models.filters import UserFilter
from models.identity import Identity
from models.pagination import PageRequest, PageResult
from repositories.user_repo import UserRepository
from security.auth import admin_only
from utils.identifiers import require_id
from utils.logger import get_logger

logger = get_logger(__name__)

_PROFILE_FIELDS = ("name", "phone", "address")


class UserService:

    def __init__(self):
        self.repo = UserRepository()

    # ── PROFILE ───────────────────────────────────────────

    def get_profile(self, identity: Identity) -> dict:
        profile = self.repo.get_profile(identity.id)
        if profile is None:
            raise NotFoundError("User", identity.id)
        return profile

    def update_profile(self, identity: Identity, data: Mapping) -> dict:
        """
        Update the caller's own name, phone and address.
        E-mail and role cannot be changed here.
        """
        fields = {k: data[k] for k in _PROFILE_FIELDS if k in data}
        if not fields:
            raise ValidationError("No profile fields given")
        if "name" in fields:
            fields["name"] = str(fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationError("Name cannot be empty", field="name")
        self.repo.update(identity.id, fields)
        return self.get_profile(identity)

    # ── ADMIN ─────────────────────────────────────────────

    @admin_only
    def list_users(self, identity: Identity, params: Optional[Mapping], page: PageRequest) -> PageResult:
        return self.repo.paginate(UserFilter.from_mapping(params, USER_ROLES), page)

    @admin_only
    def set_role(self, identity: Identity, user_id, role: str) -> dict:
        """
        Change a user's role.

        Raises:
            ValidationError: If the role is unknown or admins demote themselves.
            NotFoundError: If the user does not exist.
        """
        uid = require_id(user_id)
        if role not in USER_ROLES:
            raise ValidationError(f"Invalid role: {role!r}", field="role")
        if uid == identity.id and role != "admin":
            raise ValidationError("Admins cannot remove their own admin role", field="role")
        updated = self.repo.update(uid, {"role": role})
        logger.info(f"User #{uid} role set to {role} by user {identity.id}")
        return updated
