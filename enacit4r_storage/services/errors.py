from typing import Optional
from contextlib import contextmanager
from botocore.exceptions import ClientError

# S3 error codes meaning the key, prefix or bucket is absent
NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket", "ResourceNotFound"}


class StorageError(Exception):
  """Base exception for the storage layer.

  Attributes:
      message: Human-readable error message.
      tenant_id: Tenant associated with the operation, if any.
      key: Store key or path associated with the operation, if any.
  """

  def __init__(self, message: str, tenant_id: Optional[str] = None, key: Optional[str] = None):
    super().__init__(message)
    self.message = message
    self.tenant_id = tenant_id
    self.key = key

  def __str__(self) -> str:
    parts = [self.message]
    if self.tenant_id:
      parts.append(f"tenant_id={self.tenant_id}")
    if self.key:
      parts.append(f"key={self.key}")
    return " ".join(parts)


class InvalidPathError(StorageError):
  """Raised when a path contains a parent traversal sequence."""

  def __init__(self, message: str = "Invalid path: parent traversal is not allowed", tenant_id: Optional[str] = None, key: Optional[str] = None):
    super().__init__(message, tenant_id=tenant_id, key=key)


class NotFoundError(StorageError):
  """Raised when a key or prefix does not exist in the store."""

  def __init__(self, message: str = "Not found", tenant_id: Optional[str] = None, key: Optional[str] = None):
    super().__init__(message, tenant_id=tenant_id, key=key)


class StorageIOError(StorageError):
  """Raised on any other backend failure (connection, permission, quota...)."""

  def __init__(self, message: str = "Storage backend error", tenant_id: Optional[str] = None, key: Optional[str] = None, cause: Optional[Exception] = None):
    super().__init__(message, tenant_id=tenant_id, key=key)
    self.cause = cause


def is_not_found(error: Exception) -> bool:
  """Tell whether a backend exception means the requested object is absent.

  Args:
      error (Exception): The exception raised by the backend.

  Returns:
      bool: True for "not found" style failures.
  """
  if isinstance(error, NotFoundError):
    return True
  if isinstance(error, (FileNotFoundError, NotADirectoryError)):
    return True
  if isinstance(error, ClientError):
    code = str(error.response.get("Error", {}).get("Code", ""))
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in NOT_FOUND_CODES or status == 404
  return False


def translate_error(error: Exception, key: Optional[str] = None) -> StorageError:
  """Map a backend failure to the storage error taxonomy.

  Args:
      error (Exception): The exception raised by the backend.
      key (str, optional): The store key involved. Defaults to None.

  Returns:
      StorageError: NotFoundError for absent objects, the error itself if it
      is already a StorageError, StorageIOError otherwise.
  """
  if isinstance(error, StorageError):
    return error
  if is_not_found(error):
    return NotFoundError(f"{key} (File not found)", key=key)
  return StorageIOError(f"{key} ({error})", key=key, cause=error)


@contextmanager
def translated(key: Optional[str] = None):
  """Translate the backend failures raised in the block.

  Args:
      key (str, optional): The store key involved. Defaults to None.
  """
  try:
    yield
  except StorageError:
    raise
  except Exception as e:
    raise translate_error(e, key) from e
