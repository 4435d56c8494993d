"""
HTTP routes of the user files, the user id is always taken from the
authentication dependency.
"""
from contextlib import contextmanager
from typing import Callable, Optional
from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from pydantic import BaseModel
from ..errors import Unauthorized, InvalidPath, NotFound, StoreUnavailable, PartialDeleteFailure
from ..models.files import StoreEntry, FolderListing, UrlRef, FolderRef, DeleteResult
from ..services.files import UserFilesService


class UploadUrlRequest(BaseModel):
    key: str
    content_type: Optional[str] = None


class DownloadUrlRequest(BaseModel):
    key: str


class CreateFolderRequest(BaseModel):
    folder_name: str
    base_prefix: Optional[str] = None


class Message(BaseModel):
    message: str
    key: Optional[str] = None


@contextmanager
def files_errors():
    """Translate user files errors into HTTP errors."""
    try:
        yield
    except Unauthorized as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e),
                            headers={"WWW-Authenticate": "Bearer"})
    except InvalidPath as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PartialDeleteFailure as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail={"message": str(e), "result": e.result.model_dump()})
    except StoreUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


def make_files_router(files_service: UserFilesService, get_user_id: Callable) -> APIRouter:
    """Make the router of the file operations.

    Args:
        files_service (UserFilesService): The user files service.
        get_user_id (Callable): Dependency resolving the authenticated user id,
        e.g. `KeycloakService.get_user_id()`.

    Returns:
        APIRouter: The router, to be included in the application.
    """
    router = APIRouter()

    @router.get("/files", response_model=FolderListing)
    async def list_files(prefix: Optional[str] = None, user_id: str = Depends(get_user_id)):
        with files_errors():
            return await files_service.list_user_files(user_id, prefix)

    @router.post("/files/upload-url", response_model=UrlRef)
    async def get_upload_url(request: UploadUrlRequest, user_id: str = Depends(get_user_id)):
        with files_errors():
            return await files_service.request_upload_url(user_id, request.key, request.content_type)

    @router.post("/files/download-url", response_model=UrlRef)
    async def get_download_url(request: DownloadUrlRequest, user_id: str = Depends(get_user_id)):
        with files_errors():
            return await files_service.request_download_url(user_id, request.key)

    @router.post("/files/upload", response_model=StoreEntry)
    async def upload_file(file: UploadFile, key: Optional[str] = None, user_id: str = Depends(get_user_id)):
        content = await file.read()
        with files_errors():
            return await files_service.upload_file(user_id, key or file.filename, content, file.content_type)

    @router.post("/files/folders", response_model=FolderRef)
    async def create_folder(request: CreateFolderRequest, user_id: str = Depends(get_user_id)):
        with files_errors():
            return await files_service.create_folder(user_id, request.base_prefix, request.folder_name)

    @router.delete("/files", response_model=Message)
    async def delete_file(key: str, user_id: str = Depends(get_user_id)):
        with files_errors():
            deleted = await files_service.delete_file(user_id, key)
        return Message(message="Deleted!", key=deleted)

    @router.delete("/files/folders", response_model=DeleteResult)
    async def delete_folder(prefix: str, user_id: str = Depends(get_user_id)):
        with files_errors():
            return await files_service.delete_folder(user_id, prefix)

    return router
