"""Shared pieces for the authenticated API handlers."""

from functools import wraps
from typing import Any, Callable, Dict

from services.users import UserService

users = UserService()


def ensure_user(func: Callable) -> Callable:
    """
    Create the caller's user record on first sight.

    Must be applied below ``require_auth`` so ``event["auth"]`` is set.
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        auth = event["auth"]
        users.ensure_user(auth["user_id"], auth["email"])
        return func(event, context)

    return wrapper
