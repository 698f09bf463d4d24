"""Auth middleware - resolves the bearer token to a user, or None."""

from dataclasses import dataclass, field

import falcon.asgi

from notevault.application.dto.document_dto import Actor


@dataclass
class RequestUser:
    """User from request context."""

    user_id: str
    email: str | None = None
    username: str | None = None
    roles: list[str] = field(default_factory=list)
    is_admin: bool = False

    def as_actor(self) -> Actor:
        return Actor(
            user_id=self.user_id,
            username=self.username or self.email or self.user_id,
            is_admin=self.is_admin,
        )


class AuthMiddleware:
    """Middleware that introspects the bearer token and sets req.context.user.

    Requests without a valid token get ``user = None``; responders decide
    whether that is a 401.
    """

    def __init__(self, keycloak_provider=None, admin_role: str = "admin") -> None:
        self._keycloak = keycloak_provider
        self._admin_role = admin_role

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Extract user from Authorization header."""
        req.context.user = None
        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer ") or not self._keycloak:
            return
        user = self._keycloak.decode_token(auth[7:])
        if user and user.user_id:
            req.context.user = RequestUser(
                user_id=user.user_id,
                email=user.email,
                username=user.username,
                roles=user.roles,
                is_admin=self._admin_role in user.roles,
            )
