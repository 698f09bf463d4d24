"""Keycloak OIDC provider for bearer token validation."""

import logging
from dataclasses import dataclass, field

from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

logger = logging.getLogger(__name__)


@dataclass
class OIDCUser:
    """Authenticated user from an introspected token."""

    user_id: str
    email: str | None
    username: str | None
    roles: list[str] = field(default_factory=list)


class KeycloakProvider:
    """Keycloak OIDC - introspects tokens and extracts user info and roles."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
    ) -> None:
        self._client_id = client_id
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )

    def decode_token(self, token: str) -> OIDCUser | None:
        """Introspect token, return user info or None when it is not active."""
        try:
            token_info = self._keycloak.introspect(token)
        except KeycloakError:
            logger.warning("Token introspection failed", exc_info=True)
            return None
        if not token_info.get("active"):
            return None
        roles = list(token_info.get("realm_access", {}).get("roles", []))
        client_access = token_info.get("resource_access", {}).get(self._client_id, {})
        roles.extend(r for r in client_access.get("roles", []) if r not in roles)
        return OIDCUser(
            user_id=token_info.get("sub", ""),
            email=token_info.get("email"),
            username=token_info.get("preferred_username"),
            roles=roles,
        )
