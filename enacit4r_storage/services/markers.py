from .client import StoreClient
import logging

DEFAULT_MARKER_NAME = ".directory"


class DirectoryMarkers:
  """
  A directory exists if and only if an empty marker object is stored at
  "<directory-key>/<marker-name>". Files below a prefix do not make it a directory.
  """

  def __init__(self, marker_name: str = DEFAULT_MARKER_NAME):
    self.marker_name = marker_name

  def to_dir_key(self, key: str) -> str:
    return key if key.endswith("/") else f"{key}/"

  def marker_key_for(self, dir_key: str) -> str:
    """Get the key of the marker object of a directory.

    Args:
        dir_key (str): The directory key, with or without trailing separator.

    Returns:
        str: The marker key.
    """
    return f"{self.to_dir_key(dir_key)}{self.marker_name}"

  def is_marker(self, key: str) -> bool:
    return key == self.marker_name or key.endswith(f"/{self.marker_name}")

  def directory_of(self, marker_key: str) -> str:
    """Get the directory key (with trailing separator) a marker stands for.

    Args:
        marker_key (str): The marker key.

    Returns:
        str: The directory key.
    """
    return marker_key[:-len(self.marker_name)]

  async def is_directory(self, client: StoreClient, key: str) -> bool:
    """Check a directory exists at the specified key.

    Args:
        client (StoreClient): The store client.
        key (str): The key to check.

    Returns:
        bool: True if the directory marker exists.
    """
    return await client.exists(self.marker_key_for(key))

  async def ensure_directory(self, client: StoreClient, dir_key: str) -> bool:
    """Write the directory marker, if absent.

    Args:
        client (StoreClient): The store client.
        dir_key (str): The directory key.

    Returns:
        bool: True if the marker was created, False if it already existed.
    """
    if await self.is_directory(client, dir_key):
      return False
    marker_key = self.marker_key_for(dir_key)
    await client.write(marker_key, b"")
    logging.info(f"Directory marker created : {marker_key}")
    return True
