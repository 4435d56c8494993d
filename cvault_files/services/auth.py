from fastapi import HTTPException, status, Security, Depends
from fastapi.security import OAuth2AuthorizationCodeBearer
from keycloak import KeycloakOpenID
from ..models.auth import User
from ..models.config import AuthConfig


class KeycloakService:
    """A service to interact with keycloak for authentication and authorization.
    """

    def __init__(self, config: AuthConfig):
        url = config.keycloak_url
        realm = config.keycloak_realm
        # This is used for fastapi docs authentification
        self.oauth2_scheme = OAuth2AuthorizationCodeBearer(
            authorizationUrl=f"{url}",
            tokenUrl=(
                f"{url}/realms/{realm}"
                "/protocol/openid-connect/token"
            ),
        )
        self.keycloak_openid = KeycloakOpenID(
            server_url=url,
            client_id=config.keycloak_client_id,
            client_secret_key=config.keycloak_client_secret,
            realm_name=realm,
            verify=True,
        )

    def get_payload(self):
        """Get the payload/token from keycloak"""
        async def get_payload_impl(token: str = Security(self.oauth2_scheme)) -> dict:
            try:
                return self.keycloak_openid.decode_token(
                    token,
                )
            except Exception as e:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=str(e),  # "Invalid authentication credentials",
                    headers={"WWW-Authenticate": "Bearer"},
                )
        return get_payload_impl

    def get_user_info(self):
        """Get user info from the payload
        """
        async def get_user_info_impl(payload: dict = Depends(self.get_payload())) -> User:
            user_id = payload.get("sub")
            if not user_id:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Unauthorized: missing identity",
                    headers={"WWW-Authenticate": "Bearer"},
                )
            return User(
                id=user_id,
                username=payload.get("preferred_username"),
                email=payload.get("email"),
                first_name=payload.get("given_name"),
                last_name=payload.get("family_name"),
                realm_roles=payload.get(
                    "realm_access", {}).get("roles", []),
                client_roles=payload.get(
                    "resource_access", {}).get(self.keycloak_openid.client_id, {}).get("roles", []),
            )
        return get_user_info_impl

    def get_user_id(self):
        """Get the identifier of the authenticated user, the only identity a
        user namespace may be derived from.
        """
        async def get_user_id_impl(user: User = Depends(self.get_user_info())) -> str:
            return user.id
        return get_user_id_impl
