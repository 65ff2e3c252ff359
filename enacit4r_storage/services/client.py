from typing import AsyncIterator, Dict, Optional
from io import BytesIO
from ..models.files import ObjectProperties

class StoreClient:
  """
  The capability set of a flat, key-addressed object store. Keys are absolute
  store keys ("/tenant/folder/file.txt"), implementations map them to their own
  addressing scheme. Failures are raised as errors of the storage taxonomy.
  """

  async def exists(self, key: str) -> bool:
    """Check an object exists at the specified key.

    Args:
        key (str): The store key.

    Returns:
        bool: True if an object is stored at this exact key.
    """
    raise NotImplementedError

  async def get_metadata(self, key: str) -> ObjectProperties:
    """Get the properties of an object.

    Args:
        key (str): The store key.

    Raises:
        NotFoundError: When no object is stored at this key.

    Returns:
        ObjectProperties: Size, timestamps and user metadata.
    """
    raise NotImplementedError

  async def open_read(self, key: str) -> BytesIO:
    """Read the content of an object.

    Args:
        key (str): The store key.

    Raises:
        NotFoundError: When no object is stored at this key.

    Returns:
        BytesIO: The object content.
    """
    raise NotImplementedError

  async def write(self, key: str, data: bytes, metadata: Optional[Dict[str, str]] = None):
    """Write an object, replacing any previous content and metadata.

    Args:
        key (str): The store key.
        data (bytes): The object content.
        metadata (Dict[str, str], optional): User metadata. Defaults to None.
    """
    raise NotImplementedError

  async def delete(self, key: str):
    """Delete a single object.

    Args:
        key (str): The store key.
    """
    raise NotImplementedError

  def list_by_prefix(self, prefix: str, delimiter: Optional[str] = None) -> AsyncIterator[str]:
    """List the keys starting with a prefix.

    Without delimiter all keys are listed. With a delimiter, keys having the
    delimiter after the prefix are rolled up into a single common prefix
    (ending with the delimiter), as S3 does.

    Args:
        prefix (str): The key prefix.
        delimiter (str, optional): The hierarchy delimiter. Defaults to None.

    Returns:
        AsyncIterator[str]: The matching keys and common prefixes.
    """
    raise NotImplementedError

  async def copy(self, source_key: str, destination_key: str):
    """Copy an object server side, returns once the copy is complete.

    Args:
        source_key (str): The source store key.
        destination_key (str): The destination store key.
    """
    raise NotImplementedError
