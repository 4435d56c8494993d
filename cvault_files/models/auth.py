from typing import Optional, List
from pydantic import BaseModel, Field

class User(BaseModel):
  id: str
  username: Optional[str] = None
  email: Optional[str] = None
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  realm_roles: List[str] = Field(default_factory=list)
  client_roles: List[str] = Field(default_factory=list)
