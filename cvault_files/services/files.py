from datetime import datetime, timezone
from typing import Optional
from ..models.files import StoreEntry, FolderListing, UrlRef, FolderRef, DeleteResult
from ..errors import InvalidPath, NotFound, PartialDeleteFailure
from ..utils.files import project, guess_mime_type
from ..utils.paths import NamespaceResolver, SEPARATOR, sanitize_path
from .folders import FolderDeleter
from .s3 import S3Service
import logging

class UserFilesService:
  """
  This service provides the file operations of a user, within the user
  namespace. Paths given and returned are relative to that namespace; the
  user id must be the one asserted by the authentication layer.
  """

  def __init__(self, s3_service: S3Service, resolver: NamespaceResolver = None, deleter: FolderDeleter = None):
    """Initialize the user files service.

    Args:
        s3_service (S3Service): The store service.
        resolver (NamespaceResolver, optional): The namespace resolver. Defaults to `users/<user_id>/` namespaces.
        deleter (FolderDeleter, optional): The folder deleter. Defaults to one using the store service.
    """
    self.s3_service = s3_service
    self.resolver = resolver or NamespaceResolver()
    self.deleter = deleter or FolderDeleter(s3_service)

  async def list_user_files(self, user_id: str, prefix: Optional[str] = None) -> FolderListing:
    """List the immediate subfolders and files of a folder.

    Args:
        user_id (str): The user identifier.
        prefix (str, optional): The folder to list. Defaults to None, the namespace root.

    Returns:
        FolderListing: The folder content, keys relative to the namespace.
    """
    absolute_prefix = self.resolver.resolve_prefix(user_id, prefix)
    entries = await self.s3_service.list_entries(absolute_prefix)
    relative_entries = [
      entry.model_copy(update={"key": self.resolver.to_relative(user_id, entry.key)})
      for entry in entries
    ]
    return project(relative_entries, self.resolver.to_relative(user_id, absolute_prefix))

  async def request_upload_url(self, user_id: str, key: str, content_type: Optional[str] = None) -> UrlRef:
    """Get a time limited URL to upload a file directly to the store.

    Args:
        user_id (str): The user identifier.
        key (str): The file key.
        content_type (str, optional): The file mimetype. Defaults to a guess from the file name.

    Returns:
        UrlRef: The upload URL.
    """
    absolute_key = self._resolve_file_key(user_id, key)
    content_type = content_type or guess_mime_type(absolute_key)
    expires_in = self.s3_service.config.upload_url_expiry
    url = await self.s3_service.generate_upload_url(absolute_key, content_type, expires_in)
    return UrlRef(key=self.resolver.to_relative(user_id, absolute_key), url=url, expires_in=expires_in)

  async def request_download_url(self, user_id: str, key: str) -> UrlRef:
    """Get a time limited URL to download a file as an attachment.

    Args:
        user_id (str): The user identifier.
        key (str): The file key.

    Raises:
        NotFound: When the file does not exist.

    Returns:
        UrlRef: The download URL.
    """
    absolute_key = self._resolve_file_key(user_id, key)
    if not await self.s3_service.path_exists(absolute_key):
      raise NotFound(f"File {key} does not exist")
    expires_in = self.s3_service.config.download_url_expiry
    url = await self.s3_service.generate_download_url(absolute_key, expires_in)
    return UrlRef(key=self.resolver.to_relative(user_id, absolute_key), url=url, expires_in=expires_in)

  async def upload_file(self, user_id: str, key: str, content: bytes, content_type: Optional[str] = None) -> StoreEntry:
    """Upload a file content through the service, as is.

    Args:
        user_id (str): The user identifier.
        key (str): The file key.
        content (bytes): The file content.
        content_type (str, optional): The file mimetype. Defaults to a guess from the file name.

    Returns:
        StoreEntry: The uploaded file entry.
    """
    absolute_key = self._resolve_file_key(user_id, key)
    size = await self.s3_service.put_object(absolute_key, content, content_type or guess_mime_type(absolute_key))
    return StoreEntry(key=self.resolver.to_relative(user_id, absolute_key),
                      size=size,
                      last_modified=datetime.now(timezone.utc))

  async def create_folder(self, user_id: str, prefix: Optional[str], folder_name: str) -> FolderRef:
    """Create a folder, as a zero-byte marker object.

    Args:
        user_id (str): The user identifier.
        prefix (str, optional): The parent folder, None for the namespace root.
        folder_name (str): The name of the new folder, a single path segment.

    Returns:
        FolderRef: The created folder.
    """
    name = sanitize_path(folder_name or "").rstrip(SEPARATOR)
    if not name or SEPARATOR in name:
      raise InvalidPath(f"Invalid folder name: {folder_name}")
    folder_key = f"{self.resolver.resolve_prefix(user_id, prefix)}{name}{SEPARATOR}"
    await self.s3_service.put_object(folder_key)
    logging.info(f"Folder created: {folder_key}")
    return FolderRef(key=self.resolver.to_relative(user_id, folder_key))

  async def delete_file(self, user_id: str, key: str) -> str:
    """Delete a file. Deleting a missing file succeeds silently.

    Args:
        user_id (str): The user identifier.
        key (str): The file key.

    Returns:
        str: The deleted key.
    """
    absolute_key = self._resolve_file_key(user_id, key)
    await self.s3_service.delete_object(absolute_key)
    return self.resolver.to_relative(user_id, absolute_key)

  async def delete_folder(self, user_id: str, prefix: str) -> DeleteResult:
    """Delete a folder and everything below it.

    Args:
        user_id (str): The user identifier.
        prefix (str): The folder to delete.

    Raises:
        InvalidPath: When the prefix designates the namespace root.
        PartialDeleteFailure: When some objects could not be deleted.

    Returns:
        DeleteResult: The deleted keys.
    """
    absolute_prefix = self.resolver.resolve_prefix(user_id, prefix)
    if absolute_prefix == self.resolver.namespace(user_id):
      raise InvalidPath("Invalid path: cannot delete the root folder")
    try:
      result = await self.deleter.delete_folder(absolute_prefix)
    except PartialDeleteFailure as e:
      raise PartialDeleteFailure(self._to_relative_result(user_id, e.result)) from e
    return self._to_relative_result(user_id, result)

  #
  # Private methods
  #

  def _resolve_file_key(self, user_id: str, key: str) -> str:
    absolute_key = self.resolver.resolve_key(user_id, key)
    if absolute_key.endswith(SEPARATOR):
      raise InvalidPath(f"Invalid path: {key} is not a file")
    return absolute_key

  def _to_relative_result(self, user_id: str, result: DeleteResult) -> DeleteResult:
    to_relative = lambda key: self.resolver.to_relative(user_id, key)
    return DeleteResult(
      prefix=to_relative(result.prefix),
      deleted=[to_relative(key) for key in result.deleted],
      errors=[error.model_copy(update={"key": to_relative(error.key)}) for error in result.errors])
