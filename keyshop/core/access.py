"""
Role-based access gate.

``authorize`` decides whether a user may reach a route that requires a role.
It only compares roles for authenticated users; anonymous users are allowed
through, so every role-gated route composes ``IsAuthenticated`` in front of
the gate (see ``require_role``).
"""
from dataclasses import dataclass

from rest_framework import status
from rest_framework.permissions import BasePermission

from .models import Role


@dataclass(frozen=True)
class Decision:
    """Outcome of a single authorization check"""
    allowed: bool
    status: int = status.HTTP_200_OK
    message: str = ''

    @classmethod
    def allow(cls):
        return cls(allowed=True)

    @classmethod
    def reject(cls, status_code):
        if status_code == status.HTTP_401_UNAUTHORIZED:
            return cls(allowed=False, status=status_code, message='Unauthorized')
        return cls(allowed=False, status=status.HTTP_403_FORBIDDEN, message='Forbidden')


def is_authenticated(user):
    return user is not None and bool(getattr(user, 'is_authenticated', False))


def authorize(user, required_role):
    """
    Check ``user`` against the role required by a route.

    Args:
        user: the request user; ``None`` or an anonymous user means no one is logged in
        required_role: a ``Role`` member or its value

    Returns:
        Decision: allowed unless an authenticated user holds a different role

    Raises:
        ValueError: if ``required_role`` is not a known role
    """
    required_role = Role(required_role)
    if is_authenticated(user) and user.role != required_role:
        return Decision.reject(
            status.HTTP_403_FORBIDDEN if is_authenticated(user) else status.HTTP_401_UNAUTHORIZED
        )
    return Decision.allow()


def require_role(role, methods=None):
    """
    Build a DRF permission class that runs ``authorize`` for ``role``.

    When ``methods`` is given, only requests with those HTTP methods are gated.
    Usage:
        @permission_classes([IsAuthenticated, require_role(Role.ADMIN)])
    """
    role = Role(role)
    gated_methods = {m.upper() for m in methods} if methods else None

    class RolePermission(BasePermission):
        required_role = role
        message = 'Forbidden'

        def has_permission(self, request, view):
            if gated_methods is not None and request.method not in gated_methods:
                return True
            decision = authorize(request.user, self.required_role)
            if not decision.allowed:
                self.message = decision.message
            return decision.allowed

    RolePermission.__name__ = f'Requires{role.label}Role'
    RolePermission.__qualname__ = RolePermission.__name__
    return RolePermission
