from typing import AsyncIterator, Dict, List, Optional
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from pydantic import BaseModel, Field
from ..models.files import ObjectProperties
from .client import StoreClient
from .errors import NotFoundError, translated
import mimetypes
import logging
import shutil


class ObjectMetadata(BaseModel):
  metadata: Dict[str, str] = Field(default_factory=dict)


class LocalStoreClient(StoreClient):
  """
  Object store client on the local file system: each key is a file under the
  base path and user metadata is kept in a ".meta" JSON file next to it.
  Directories on disk are only a storage detail, they are not objects.
  """

  meta_extension = ".meta"

  def __init__(self, base_path: str = "."):
    """Initialize the local store with a base path.

    Args:
        base_path (str): The base path of the store. Defaults to current directory.
    """
    self.base_path = Path(base_path).resolve()
    self.base_path.mkdir(parents=True, exist_ok=True)

  def _get_full_path(self, key: str) -> Path:
    """Get the full path by joining with base path.

    Args:
        key (str): The store key.

    Returns:
        Path: The full resolved path.
    """
    full_path = (self.base_path / key.lstrip("/")).resolve()
    # Ensure the path is within base_path (security check)
    if not full_path.is_relative_to(self.base_path):
      raise ValueError(f"Path {key} is outside the base path")
    return full_path

  def _to_key(self, path: Path) -> str:
    return f"/{path.relative_to(self.base_path).as_posix()}"

  def _meta_path(self, full_path: Path) -> Path:
    return full_path.with_name(full_path.name + self.meta_extension)

  def _read_object_metadata(self, full_path: Path) -> ObjectMetadata:
    """Read the metadata file associated with an object.

    Args:
        full_path (Path): The path of the object.

    Returns:
        ObjectMetadata: The metadata, empty when there is no metadata file.
    """
    meta_path = self._meta_path(full_path)
    if not meta_path.is_file():
      return ObjectMetadata()
    with open(meta_path, "r") as f:
      return ObjectMetadata.model_validate_json(f.read())

  def _dump_object_metadata(self, full_path: Path, metadata: Optional[Dict[str, str]]):
    """Dump the metadata of an object, remove stale metadata when there is none.

    Args:
        full_path (Path): The path of the object.
        metadata (Dict[str, str], optional): The user metadata.
    """
    meta_path = self._meta_path(full_path)
    if metadata:
      with open(meta_path, "w") as f:
        f.write(ObjectMetadata(metadata=metadata).model_dump_json())
    elif meta_path.exists():
      meta_path.unlink()

  def _prune_empty_dirs(self, directory: Path):
    # leave no empty folder behind, so that a file can later take its name
    while directory != self.base_path and directory.is_dir() and not any(directory.iterdir()):
      directory.rmdir()
      directory = directory.parent

  async def exists(self, key: str) -> bool:
    """Check an object exists at the specified key.

    Args:
        key (str): The store key.

    Returns:
        bool: True if a file is stored at this key.
    """
    with translated(key):
      return self._get_full_path(key).is_file()

  async def get_metadata(self, key: str) -> ObjectProperties:
    """Get the properties of an object.

    Args:
        key (str): The store key.

    Returns:
        ObjectProperties: Size, timestamps and user metadata.
    """
    with translated(key):
      full_path = self._get_full_path(key)
      if not full_path.is_file():
        raise NotFoundError(f"{key} (File not found)", key=key)
      stat = full_path.stat()
      mime_type, _ = mimetypes.guess_type(str(full_path))
      created = getattr(stat, "st_birthtime", stat.st_ctime)
      return ObjectProperties(
        size=stat.st_size,
        last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        creation_time=datetime.fromtimestamp(created, tz=timezone.utc),
        content_type=mime_type,
        metadata=self._read_object_metadata(full_path).metadata)

  async def open_read(self, key: str) -> BytesIO:
    """Read the content of an object.

    Args:
        key (str): The store key.

    Returns:
        BytesIO: The object content.
    """
    with translated(key):
      full_path = self._get_full_path(key)
      if not full_path.is_file():
        raise NotFoundError(f"{key} (File not found)", key=key)
      with open(full_path, "rb") as f:
        return BytesIO(f.read())

  async def write(self, key: str, data: bytes, metadata: Optional[Dict[str, str]] = None):
    """Write an object, replacing any previous content and metadata.

    Args:
        key (str): The store key.
        data (bytes): The object content.
        metadata (Dict[str, str], optional): User metadata. Defaults to None.
    """
    with translated(key):
      full_path = self._get_full_path(key)
      full_path.parent.mkdir(parents=True, exist_ok=True)
      with open(full_path, "wb") as f:
        f.write(data)
      self._dump_object_metadata(full_path, metadata)
    logging.info(f"File uploaded path : {full_path}")

  async def delete(self, key: str):
    """Delete a single object.

    Args:
        key (str): The store key.
    """
    with translated(key):
      full_path = self._get_full_path(key)
      if not full_path.is_file():
        raise NotFoundError(f"{key} (File not found)", key=key)
      full_path.unlink()
      meta_path = self._meta_path(full_path)
      if meta_path.exists():
        meta_path.unlink()
      self._prune_empty_dirs(full_path.parent)
    logging.info(f"File deleted path : {full_path}")

  def _list_keys(self, prefix: str, delimiter: Optional[str]) -> List[str]:
    # walk the deepest folder fully covered by the prefix
    folder = prefix[:prefix.rfind("/") + 1]
    root = self._get_full_path(folder)
    if not root.is_dir():
      return []
    keys = []
    common_prefixes = set()
    for item in sorted(root.rglob("*")):
      if not item.is_file() or item.name.endswith(self.meta_extension):
        continue
      key = self._to_key(item)
      if not key.startswith(prefix):
        continue
      if delimiter:
        rest = key[len(prefix):]
        if delimiter in rest:
          common_prefixes.add(prefix + rest[:rest.index(delimiter) + len(delimiter)])
          continue
      keys.append(key)
    return keys + sorted(common_prefixes)

  async def list_by_prefix(self, prefix: str, delimiter: Optional[str] = None) -> AsyncIterator[str]:
    """List the keys starting with a prefix. The listing is taken before the
    first key is yielded, deleting while iterating is safe.

    Args:
        prefix (str): The key prefix.
        delimiter (str, optional): The hierarchy delimiter. Defaults to None.

    Returns:
        AsyncIterator[str]: The matching keys and common prefixes.
    """
    with translated(prefix):
      keys = self._list_keys(prefix, delimiter)
    for key in keys:
      yield key

  async def copy(self, source_key: str, destination_key: str):
    """Copy an object with its metadata.

    Args:
        source_key (str): The source store key.
        destination_key (str): The destination store key.
    """
    with translated(source_key):
      source = self._get_full_path(source_key)
      destination = self._get_full_path(destination_key)
      if not source.is_file():
        raise NotFoundError(f"{source_key} (File not found)", key=source_key)
      if destination.is_dir():
        raise IsADirectoryError(f"{destination_key} is a folder on disk")
      destination.parent.mkdir(parents=True, exist_ok=True)
      shutil.copy2(source, destination)
      self._dump_object_metadata(destination, self._read_object_metadata(source).metadata)
    logging.info(f"File copied path : {source} -> {destination}")
