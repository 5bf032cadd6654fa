"""
security/auth.py
-----------------
Admin access checks for service operations.
The session provider authenticates callers; this module only decides
whether an authenticated identity may use admin operations.
"""

from functools import wraps
from typing import Callable, Optional

from config import ADMIN_EMAILS, ADMIN_ROLE
from exceptions import PermissionDeniedError
from models.identity import Identity
from utils.logger import get_logger

logger = get_logger(__name__)


def has_admin_access(identity: Optional[Identity]) -> bool:
    """
    Whether the identity may use admin operations.

    Behavior:
        - Identities whose e-mail is in ADMIN_EMAILS are admins.
        - Otherwise the role must equal ADMIN_ROLE.
    """
    if identity is None:
        return False
    if identity.email and identity.email.lower() in ADMIN_EMAILS:
        return True
    return identity.role == ADMIN_ROLE


def admin_only(func: Callable):
    """
    Decorator that restricts a service method to admins.

    Usage:
        @admin_only
        def list_orders(self, identity, ...):
            ...

    The identity must be the first argument after `self`.
    Non-admin calls are logged and raise PermissionDeniedError.
    """
    @wraps(func)
    def wrapper(self, identity: Optional[Identity], *args, **kwargs):
        if not has_admin_access(identity):
            logger.warning(
                f"Denied admin operation {func.__name__}: "
                f"user_id={getattr(identity, 'id', None)}, role={getattr(identity, 'role', None)}"
            )
            raise PermissionDeniedError("Admin access required")
        return func(self, identity, *args, **kwargs)

    return wrapper
