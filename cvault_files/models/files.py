from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

class StoreEntry(BaseModel):
  key: str
  size: Optional[int] = None
  last_modified: Optional[datetime] = None

class FileNode(BaseModel):
  key: str
  name: str
  size: Optional[int] = None
  last_modified: Optional[datetime] = None
  is_file: bool
  status: Optional[str] = None

class FolderListing(BaseModel):
  prefix: str
  folders: List[FileNode] = Field(default_factory=list)
  files: List[FileNode] = Field(default_factory=list)

class UrlRef(BaseModel):
  key: str
  url: str
  expires_in: int

class FolderRef(BaseModel):
  key: str

class DeleteError(BaseModel):
  key: str
  code: Optional[str] = None
  message: Optional[str] = None

class DeleteResult(BaseModel):
  prefix: str
  deleted: List[str] = Field(default_factory=list)
  errors: List[DeleteError] = Field(default_factory=list)
