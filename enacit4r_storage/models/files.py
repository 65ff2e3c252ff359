from datetime import datetime
from typing import Optional, List, Dict, NamedTuple
from pydantic import BaseModel, Field

class ObjectProperties(BaseModel):
  size: int = 0
  last_modified: Optional[datetime] = None
  creation_time: Optional[datetime] = None
  content_type: Optional[str] = None
  metadata: Dict[str, str] = Field(default_factory=dict)

class FileAttributes(BaseModel):
  name: str
  path: Optional[str] = None
  is_directory: bool
  size: int = 0
  last_modified: Optional[datetime] = None
  creation_time: Optional[datetime] = None
  metadata: Dict[str, str] = Field(default_factory=dict)

class FileNode(BaseModel):
  name: str
  path: Optional[str] = None
  size: Optional[int] = None
  is_file: bool
  children: Optional[List["FileNode"]] = Field(default_factory=list)

class ListedKey(NamedTuple):
  key: str
  is_directory: bool

# We need to update self references.
FileNode.model_rebuild()
