from typing import Optional
from pathlib import PurePosixPath
from ..models.files import FileAttributes, ObjectProperties
from .client import StoreClient
from .errors import NotFoundError
from .markers import DirectoryMarkers


class AttributeResolver:
  """
  Classifies a key as file or directory and exposes its properties. The
  directory marker is probed first: when a file and a marker share a key,
  the directory wins.
  """

  def __init__(self, markers: DirectoryMarkers = None):
    self.markers = markers if markers is not None else DirectoryMarkers()

  async def _dir_properties(self, client: StoreClient, key: str) -> Optional[ObjectProperties]:
    try:
      return await client.get_metadata(self.markers.marker_key_for(key))
    except NotFoundError:
      return None

  async def attributes_of(self, client: StoreClient, key: str, path: Optional[str] = None) -> FileAttributes:
    """Get the attributes of a file or directory.

    Args:
        client (StoreClient): The store client.
        key (str): The store key.
        path (str, optional): The external URI to report. Defaults to None.

    Raises:
        NotFoundError: When neither a directory nor a file exists at this key.

    Returns:
        FileAttributes: The entry attributes.
    """
    name = PurePosixPath(key).name
    props = await self._dir_properties(client, key)
    is_directory = props is not None
    if not is_directory:
      file_key = key.rstrip("/")
      try:
        props = await client.get_metadata(file_key)
      except NotFoundError:
        raise NotFoundError(f"{name} (File not found)", key=file_key)
    return FileAttributes(
      name=name,
      path=path,
      is_directory=is_directory,
      size=0 if is_directory else props.size,
      last_modified=props.last_modified,
      creation_time=props.creation_time,
      metadata=props.metadata)
