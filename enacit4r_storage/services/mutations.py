from typing import Dict, List, Optional
from .client import StoreClient
from .errors import InvalidPathError, NotFoundError
from .markers import DirectoryMarkers
from .paths import PathResolver
import logging


class MutationCoordinator:
  """
  Composite mutations built from single-object store calls. None of them is
  atomic: each one is an ordered sequence of idempotent steps and a failure
  leaves the store in the state the completed steps produced, without rollback.
  """

  def __init__(self, client: StoreClient, resolver: PathResolver = None, markers: DirectoryMarkers = None):
    self.client = client
    self.resolver = resolver if resolver is not None else PathResolver()
    self.markers = markers if markers is not None else DirectoryMarkers()

  async def materialize_ancestors(self, tenant_id: Optional[str], key: str):
    """Create the markers of every directory from the tenant root down to the
    parent of the key (or the key itself when it ends with a separator).

    Args:
        tenant_id (str, optional): The tenant.
        key (str): The store key being written.
    """
    dir_key = key if key.endswith("/") else key[:key.rfind("/") + 1]
    # one check is enough when the immediate parent already exists
    if await self.markers.is_directory(self.client, dir_key):
      return
    root_key = self.resolver.root_key(tenant_id)
    aggregated = root_key
    await self.markers.ensure_directory(self.client, aggregated)
    for directory in dir_key[len(root_key):].split("/"):
      if not directory:
        continue
      aggregated = f"{aggregated}{directory}/"
      await self.markers.ensure_directory(self.client, aggregated)

  async def write(self, tenant_id: Optional[str], uri: str, data: bytes, metadata: Optional[Dict[str, str]] = None) -> str:
    """Write a file, materializing its ancestor directories first.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The external URI of the file.
        data (bytes): The file content.
        metadata (Dict[str, str], optional): User metadata. Defaults to None.

    Raises:
        InvalidPathError: When the URI ends with a separator.

    Returns:
        str: The canonical URI of the file.
    """
    key = self.resolver.resolve(tenant_id, uri)
    self._check_file_key(tenant_id, key, uri)
    await self.materialize_ancestors(tenant_id, key)
    await self.client.write(key, data, metadata or {})
    return self.resolver.canonical(uri)

  def _check_file_key(self, tenant_id: Optional[str], key: str, uri: str):
    # file keys never end with a separator
    if key.endswith("/"):
      raise InvalidPathError("A file path cannot end with a separator", tenant_id=tenant_id, key=uri)

  async def create_directory(self, tenant_id: Optional[str], uri: str) -> str:
    """Create a directory and its missing ancestors.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The external URI of the directory.

    Returns:
        str: The canonical URI of the directory.
    """
    key = self.markers.to_dir_key(self.resolver.resolve(tenant_id, uri))
    await self.materialize_ancestors(tenant_id, key)
    return self.resolver.canonical(uri)

  async def delete(self, tenant_id: Optional[str], uri: str) -> bool:
    """Delete a file, or a directory with all its content.

    Args:
        tenant_id (str, optional): The tenant.
        uri (str): The external URI.

    Returns:
        bool: True if something was deleted, False if nothing exists at this path.
    """
    key = self.resolver.resolve(tenant_id, uri)
    if await self.markers.is_directory(self.client, key):
      return len(await self.delete_by_prefix(tenant_id, uri)) > 0
    if not await self.client.exists(key):
      return False
    return await self._delete_key(key)

  async def delete_by_prefix(self, tenant_id: Optional[str], prefix: str) -> List[str]:
    """Delete recursively everything under a prefix, files first, then the
    directory markers from the deepest to the prefix's own one.

    Args:
        tenant_id (str, optional): The tenant.
        prefix (str): The external URI of the prefix.

    Returns:
        List[str]: The external URIs of the deleted files and directories,
        empty if the prefix does not exist.
    """
    path = self.markers.to_dir_key(self.resolver.resolve(tenant_id, prefix))
    return [self.resolver.unresolve(tenant_id, key) for key in await self._delete_tree(path)]

  async def _delete_tree(self, path: str) -> List[str]:
    deleted = []
    directories = []
    try:
      async for key in self.client.list_by_prefix(path):
        if self.markers.is_marker(key):
          directories.append(self.markers.directory_of(key))
          continue
        if await self._delete_key(key):
          deleted.append(key)
    except NotFoundError:
      return []

    # children before parents
    directories.sort(key=len, reverse=True)
    for directory in directories:
      if await self._delete_key(self.markers.marker_key_for(directory)):
        deleted.append(directory)
    return deleted

  async def _delete_key(self, key: str) -> bool:
    try:
      await self.client.delete(key)
    except NotFoundError:
      logging.warning(f"Object already deleted : {key}")
      return False
    return True

  async def move(self, tenant_id: Optional[str], source: str, destination: str) -> str:
    """Move a file or a directory: copy every object to the destination, one
    at a time, then delete the source. The source is left intact if a copy fails.

    Args:
        tenant_id (str, optional): The tenant.
        source (str): The external URI of the source.
        destination (str): The external URI of the destination.

    Raises:
        NotFoundError: When the source does not exist.
        InvalidPathError: When moving a directory inside itself, or a file to a
        path ending with a separator.

    Returns:
        str: The canonical URI of the source.
    """
    source_key = self.resolver.resolve(tenant_id, source)
    destination_key = self.resolver.resolve(tenant_id, destination)

    if await self.markers.is_directory(self.client, source_key):
      source_key = self.markers.to_dir_key(source_key)
      destination_key = self.markers.to_dir_key(destination_key)
      if source_key == destination_key:
        return self.resolver.canonical(source)
      if destination_key.startswith(source_key):
        raise InvalidPathError("Cannot move a directory into itself", tenant_id=tenant_id, key=destination)
      await self._move_directory(tenant_id, source_key, destination_key)
      await self._delete_tree(source_key)
    elif await self.client.exists(source_key):
      if source_key == destination_key:
        return self.resolver.canonical(source)
      self._check_file_key(tenant_id, destination_key, destination)
      await self._copy_key(tenant_id, source_key, destination_key)
      await self._delete_key(source_key)
    else:
      raise NotFoundError(f"{source} (File not found)", tenant_id=tenant_id, key=source)

    return self.resolver.canonical(source)

  async def _move_directory(self, tenant_id: Optional[str], source_key: str, destination_key: str):
    # snapshot first, the destination may be listed under the same prefix
    keys = [key async for key in self.client.list_by_prefix(source_key)]
    for key in keys:
      destination_name = f"{destination_key}{key[len(source_key):]}"
      if self.markers.is_marker(key):
        # directories are rebuilt, markers are not copied
        await self.materialize_ancestors(tenant_id, self.markers.directory_of(destination_name))
        continue
      await self._copy_key(tenant_id, key, destination_name)

  async def _copy_key(self, tenant_id: Optional[str], key: str, destination_key: str):
    await self.materialize_ancestors(tenant_id, destination_key)
    await self.client.copy(key, destination_key)
