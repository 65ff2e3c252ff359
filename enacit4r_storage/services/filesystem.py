from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union
from datetime import datetime
from io import BytesIO
from pathlib import PurePosixPath
from ..models.files import FileAttributes, FileNode
from ..utils.files import FileNodeBuilder
from .attributes import AttributeResolver
from .client import StoreClient
from .errors import NotFoundError, StorageError
from .listing import KeyEnumerator
from .markers import DirectoryMarkers
from .mutations import MutationCoordinator
from .paths import PathResolver
import asyncio
import logging
import threading


class FileSystem:
  """
  This service provides a hierarchical, tenant-isolated file system on top
  of a flat object store. The tenant is optional, None means no tenant prefixing.
  """

  def __init__(self, client: StoreClient, resolver: PathResolver = None, markers: DirectoryMarkers = None):
    """Initialize the file system.

    Args:
        client (StoreClient): The object store client.
        resolver (PathResolver, optional): The path resolver. Defaults to None.
        markers (DirectoryMarkers, optional): The directory marker protocol. Defaults to None.
    """
    self.client = client
    self.resolver = resolver if resolver is not None else PathResolver()
    self.markers = markers if markers is not None else DirectoryMarkers()
    self.enumerator = KeyEnumerator(self.markers)
    self.attributes = AttributeResolver(self.markers)
    self.mutations = MutationCoordinator(client, self.resolver, self.markers)

  async def get(self, tenant_id: Optional[str], uri: str) -> BytesIO:
    """Read a file.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The file URI.

    Raises:
        NotFoundError: When the file does not exist.

    Returns:
        BytesIO: The file content.
    """
    key = self.resolver.resolve(tenant_id, uri)
    return await self.client.open_read(key)

  async def get_with_metadata(self, tenant_id: Optional[str], uri: str) -> Tuple[Dict[str, str], BytesIO]:
    """Read a file and its metadata.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The file URI.

    Returns:
        Tuple[Dict[str, str], BytesIO]: File metadata and content.
    """
    key = self.resolver.resolve(tenant_id, uri)
    props = await self.client.get_metadata(key)
    return props.metadata, await self.client.open_read(key)

  async def put(self, tenant_id: Optional[str], uri: str, content: Union[bytes, BinaryIO], metadata: Optional[Dict[str, str]] = None) -> str:
    """Write a file, creating its parent directories.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The file URI.
        content (Union[bytes, BinaryIO]): The file content, raw or as a readable stream.
        metadata (Dict[str, str], optional): The file metadata. Defaults to None.

    Returns:
        str: The canonical URI of the file.
    """
    data = content.read() if hasattr(content, "read") else content
    return await self.mutations.write(tenant_id, uri, data, metadata)

  async def exists(self, tenant_id: Optional[str], uri: str) -> bool:
    """Check a file or a directory exists at the specified path.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The URI to check.

    Returns:
        bool: True if the path exists, False otherwise, also on backend errors.
    """
    key = self.resolver.resolve(tenant_id, uri)
    try:
      if not key.endswith("/") and await self.client.exists(key):
        return True
      return await self.markers.is_directory(self.client, key)
    except StorageError as e:
      logging.error(f"Error checking path existence for {uri}: {e}")
      return False

  async def size(self, tenant_id: Optional[str], uri: str) -> int:
    key = self.resolver.resolve(tenant_id, uri)
    return (await self.client.get_metadata(key)).size

  async def last_modified_time(self, tenant_id: Optional[str], uri: str) -> datetime:
    key = self.resolver.resolve(tenant_id, uri)
    return (await self.client.get_metadata(key)).last_modified

  async def list(self, tenant_id: Optional[str], uri: str) -> List[FileAttributes]:
    """List the files and directories in the specified directory.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The directory URI.

    Raises:
        NotFoundError: When the path is not a directory.

    Returns:
        List[FileAttributes]: The attributes of the immediate children.
    """
    key = self.markers.to_dir_key(self.resolver.resolve(tenant_id, uri))
    if not await self.markers.is_directory(self.client, key):
      raise NotFoundError(f"{uri} (Not Found)", tenant_id=tenant_id, key=uri)
    entries = []
    async for listed in self.enumerator.list(self.client, key, recursive=False, include_directories=True):
      entries.append(await self.attributes.attributes_of(
        self.client, listed.key, self.resolver.unresolve(tenant_id, listed.key)))
    return entries

  async def all_by_prefix(self, tenant_id: Optional[str], prefix: str, include_directories: bool = False) -> List[str]:
    """List recursively all the files, and optionally directories, under a prefix.

    Args:
        tenant_id (str, optional): The tenant.
        prefix (str): The prefix URI.
        include_directories (bool, optional): Whether to include directories. Defaults to False.

    Returns:
        List[str]: The decoded URIs, in no particular order.
    """
    key = self.resolver.resolve(tenant_id, prefix)
    uris = []
    async for listed in self.enumerator.list(self.client, key, recursive=True, include_directories=include_directories):
      uris.append(self.resolver.unresolve(tenant_id, listed.key))
    return uris

  async def get_attributes(self, tenant_id: Optional[str], uri: str) -> FileAttributes:
    key = self.resolver.resolve(tenant_id, uri)
    return await self.attributes.attributes_of(self.client, key, self.resolver.canonical(uri))

  async def create_directory(self, tenant_id: Optional[str], uri: str) -> str:
    return await self.mutations.create_directory(tenant_id, uri)

  async def move(self, tenant_id: Optional[str], source: str, destination: str) -> str:
    return await self.mutations.move(tenant_id, source, destination)

  async def delete(self, tenant_id: Optional[str], uri: str) -> bool:
    return await self.mutations.delete(tenant_id, uri)

  async def delete_by_prefix(self, tenant_id: Optional[str], prefix: str) -> List[str]:
    return await self.mutations.delete_by_prefix(tenant_id, prefix)

  async def tree(self, tenant_id: Optional[str], uri: str) -> FileNode:
    """Get the full subtree of a directory as nested file nodes.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The directory URI.

    Raises:
        NotFoundError: When the path is not a directory.

    Returns:
        FileNode: The directory node, with its descendants as children.
    """
    key = self.markers.to_dir_key(self.resolver.resolve(tenant_id, uri))
    if not await self.markers.is_directory(self.client, key):
      raise NotFoundError(f"{uri} (Not Found)", tenant_id=tenant_id, key=uri)
    root_path = self.resolver.unresolve(tenant_id, key)
    name = PurePosixPath(self.resolver.strip_scheme(root_path)).name
    builder = FileNodeBuilder.from_name(name=name, path=root_path)
    async for listed in self.enumerator.list(self.client, key, recursive=True, include_directories=True):
      relative = listed.key[len(key):]
      if listed.is_directory:
        builder.add_directory(relative)
      else:
        size = (await self.client.get_metadata(listed.key)).size
        builder.add_file(relative, size)
    return builder.build()


class BlockingFileSystem:
  """
  Blocking facade of a FileSystem. The coroutines run one at a time on a private
  event loop owned by a single worker thread, the caller's thread waits for each result.
  """

  def __init__(self, fs: FileSystem):
    self.fs = fs
    self._loop = asyncio.new_event_loop()
    self._thread = threading.Thread(target=self._loop.run_forever, name="blocking-filesystem", daemon=True)
    self._thread.start()

  def _run(self, coro) -> Any:
    return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

  def close(self):
    """Stop the worker thread and close its event loop."""
    self._loop.call_soon_threadsafe(self._loop.stop)
    self._thread.join()
    self._loop.close()

  def get(self, tenant_id: Optional[str], uri: str) -> BytesIO:
    return self._run(self.fs.get(tenant_id, uri))

  def get_with_metadata(self, tenant_id: Optional[str], uri: str) -> Tuple[Dict[str, str], BytesIO]:
    return self._run(self.fs.get_with_metadata(tenant_id, uri))

  def put(self, tenant_id: Optional[str], uri: str, content: Union[bytes, BinaryIO], metadata: Optional[Dict[str, str]] = None) -> str:
    return self._run(self.fs.put(tenant_id, uri, content, metadata))

  def exists(self, tenant_id: Optional[str], uri: str) -> bool:
    return self._run(self.fs.exists(tenant_id, uri))

  def size(self, tenant_id: Optional[str], uri: str) -> int:
    return self._run(self.fs.size(tenant_id, uri))

  def last_modified_time(self, tenant_id: Optional[str], uri: str) -> datetime:
    return self._run(self.fs.last_modified_time(tenant_id, uri))

  def list(self, tenant_id: Optional[str], uri: str) -> List[FileAttributes]:
    return self._run(self.fs.list(tenant_id, uri))

  def all_by_prefix(self, tenant_id: Optional[str], prefix: str, include_directories: bool = False) -> List[str]:
    return self._run(self.fs.all_by_prefix(tenant_id, prefix, include_directories))

  def get_attributes(self, tenant_id: Optional[str], uri: str) -> FileAttributes:
    return self._run(self.fs.get_attributes(tenant_id, uri))

  def create_directory(self, tenant_id: Optional[str], uri: str) -> str:
    return self._run(self.fs.create_directory(tenant_id, uri))

  def move(self, tenant_id: Optional[str], source: str, destination: str) -> str:
    return self._run(self.fs.move(tenant_id, source, destination))

  def delete(self, tenant_id: Optional[str], uri: str) -> bool:
    return self._run(self.fs.delete(tenant_id, uri))

  def delete_by_prefix(self, tenant_id: Optional[str], prefix: str) -> List[str]:
    return self._run(self.fs.delete_by_prefix(tenant_id, prefix))

  def tree(self, tenant_id: Optional[str], uri: str) -> FileNode:
    return self._run(self.fs.tree(tenant_id, uri))
