from .files import UserFilesService
from .folders import FolderDeleter
from .s3 import S3Service
from ..errors import FilesError, Unauthorized, InvalidPath, NotFound, StoreUnavailable, PartialDeleteFailure
