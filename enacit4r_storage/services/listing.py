from typing import AsyncIterator
from ..models.files import ListedKey
from .client import StoreClient
from .markers import DirectoryMarkers

DELIMITER = "/"


class KeyEnumerator:
  """
  Reconstructs a tree view from the flat key listing of a store: either the
  immediate children of a prefix or its full subtree.
  """

  def __init__(self, markers: DirectoryMarkers = None):
    self.markers = markers if markers is not None else DirectoryMarkers()

  async def list(self, client: StoreClient, prefix_key: str, recursive: bool = True, include_directories: bool = True) -> AsyncIterator[ListedKey]:
    """List the entries under a prefix. Each call queries the store again.

    Args:
        client (StoreClient): The store client.
        prefix_key (str): The store key prefix.
        recursive (bool, optional): Whether to list the full subtree. Defaults to True.
        include_directories (bool, optional): Whether to yield directory entries. Defaults to True.

    Returns:
        AsyncIterator[ListedKey]: The entries, in no particular order.
    """
    delimiter = None if recursive else DELIMITER
    seen_directories = set()
    async for key in client.list_by_prefix(prefix_key, delimiter):
      if self.markers.is_marker(key):
        entry = ListedKey(self.markers.directory_of(key), True)
      elif key.endswith(DELIMITER):
        # common prefix or folder placeholder, a directory only if it has a marker
        if not include_directories or key in seen_directories:
          continue
        if not await self.markers.is_directory(client, key):
          continue
        entry = ListedKey(key, True)
      else:
        entry = ListedKey(key, False)

      relative = entry.key[len(prefix_key):] if entry.key.startswith(prefix_key) else entry.key
      # skip the requested prefix itself
      if relative == "" or relative == DELIMITER:
        continue
      if entry.is_directory:
        if not include_directories or entry.key in seen_directories:
          continue
        seen_directories.add(entry.key)
      yield entry
