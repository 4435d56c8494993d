from typing import List
from ..models.files import DeleteResult
from ..errors import PartialDeleteFailure
from .s3 import S3Service
import logging


class FolderDeleter:
  """
  Deletes a folder, i.e. every object whose key starts with the folder prefix.
  Folders only exist as a naming convention over keys, so deleting one means
  listing its objects and removing them in bulk.

  Objects written under the prefix while the deletion runs may survive it.
  """

  def __init__(self, s3_service: S3Service, batch_size: int = None):
    """Initialize the folder deleter.

    Args:
        s3_service (S3Service): The store service.
        batch_size (int, optional): Max keys per bulk delete. Defaults to the store configuration.
    """
    self.s3_service = s3_service
    self.batch_size = batch_size or s3_service.config.delete_batch_size

  async def delete_folder(self, prefix: str) -> DeleteResult:
    """Delete all the objects under a prefix, or its marker if nothing is listed.

    Args:
        prefix (str): The absolute folder prefix.

    Raises:
        StoreUnavailable: When listing or deleting fails, the error step tells which.
        PartialDeleteFailure: When some objects could not be deleted.

    Returns:
        DeleteResult: The deleted keys.
    """
    entries = await self.s3_service.list_entries(prefix)
    keys = [entry.key for entry in entries]
    result = DeleteResult(prefix=prefix)

    if not any(key != prefix for key in keys):
      # empty folder, only the zero-byte marker may remain
      await self.s3_service.delete_object(prefix)
      result.deleted.append(prefix)
      logging.info(f"Empty folder deleted: {prefix}")
      return result

    for batch in self._batches(keys):
      errors = await self.s3_service.delete_objects(batch)
      failed = {error.key for error in errors}
      result.deleted.extend(key for key in batch if key not in failed)
      result.errors.extend(errors)

    if result.errors:
      logging.warning(f"Folder {prefix} partially deleted, {len(result.errors)} object(s) remaining")
      raise PartialDeleteFailure(result)
    logging.info(f"Folder deleted: {prefix} ({len(result.deleted)} objects)")
    return result

  def _batches(self, keys: List[str]):
    for start in range(0, len(keys), self.batch_size):
      yield keys[start:start + self.batch_size]
