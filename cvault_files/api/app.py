from fastapi import FastAPI
from ..models.config import S3Config, AuthConfig
from ..services.auth import KeycloakService
from ..services.files import UserFilesService
from ..services.s3 import S3Service
from .files import make_files_router


def create_app(s3_config: S3Config = None, auth_config: AuthConfig = None) -> FastAPI:
    """Make the web application serving the user files.

    Args:
        s3_config (S3Config, optional): The store settings. Defaults to the environment.
        auth_config (AuthConfig, optional): The keycloak settings. Defaults to the environment.

    Returns:
        FastAPI: The application.
    """
    s3_config = s3_config or S3Config()
    auth_config = auth_config or AuthConfig()

    keycloak = KeycloakService(auth_config)
    files_service = UserFilesService(S3Service(s3_config))

    app = FastAPI(title="CVault files")
    app.state.files_service = files_service
    app.state.get_user_id = keycloak.get_user_id()
    app.include_router(make_files_router(files_service, app.state.get_user_id))
    return app
