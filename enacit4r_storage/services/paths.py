from typing import Optional
import urllib.parse
from .errors import InvalidPathError

DEFAULT_SCHEME = "storage://"


class PathResolver:
  """
  Converts external URIs to store keys and back. A store key is absolute and,
  when a tenant is given, starts with the tenant segment.
  """

  def __init__(self, scheme: str = DEFAULT_SCHEME):
    self.scheme = scheme

  def strip_scheme(self, uri: str) -> str:
    """Get the path part of an external URI.

    Args:
        uri (str): The external URI, with or without scheme.

    Returns:
        str: The path as passed by the caller.
    """
    if uri.startswith(self.scheme):
      return uri[len(self.scheme):]
    return uri

  def check_path(self, path: str, tenant_id: Optional[str] = None):
    """Reject paths with parent traversal, also when percent-encoded.

    Args:
        path (str): The path to check.
        tenant_id (str, optional): The tenant, for error reporting. Defaults to None.

    Raises:
        InvalidPathError: If the path contains "..".
    """
    if ".." in path or ".." in urllib.parse.unquote(path):
      raise InvalidPathError(
        "File should be accessed with their full path and not using relative '..' path",
        tenant_id=tenant_id,
        key=path)

  def check_tenant(self, tenant_id: Optional[str]):
    if tenant_id is not None and (not tenant_id or "/" in tenant_id or ".." in tenant_id):
      raise InvalidPathError("Invalid tenant identifier", tenant_id=tenant_id)

  def resolve(self, tenant_id: Optional[str], uri: Optional[str]) -> str:
    """Make the store key of an external URI.

    Args:
        tenant_id (str, optional): The tenant, None for no tenant prefixing.
        uri (str): The external URI.

    Raises:
        InvalidPathError: If the URI or the tenant attempts a traversal.

    Returns:
        str: The store key.
    """
    path = self.strip_scheme(uri or "/")
    self.check_path(path, tenant_id)
    self.check_tenant(tenant_id)
    path = urllib.parse.unquote(path)
    if not path.startswith("/"):
      path = f"/{path}"
    if tenant_id is not None:
      return f"/{tenant_id}{path}"
    return path

  def unresolve(self, tenant_id: Optional[str], key: str) -> str:
    """Make the external URI of a store key.

    Args:
        tenant_id (str, optional): The tenant the key belongs to.
        key (str): The store key.

    Returns:
        str: The external URI, without tenant segment.
    """
    path = key
    tenant_prefix = f"/{tenant_id}/"
    if tenant_id is not None and (path.startswith(tenant_prefix) or path == tenant_prefix[:-1]):
      path = path[len(tenant_prefix) - 1:] or "/"
    return f"{self.scheme}{path}"

  def canonical(self, uri: str) -> str:
    """Get the canonical URI of a caller path, scheme plus the path as passed.

    Args:
        uri (str): The external URI.

    Returns:
        str: The canonical URI.
    """
    return f"{self.scheme}{self.strip_scheme(uri)}"

  def root_key(self, tenant_id: Optional[str]) -> str:
    """Get the key of the root directory of a tenant.

    Args:
        tenant_id (str, optional): The tenant.

    Returns:
        str: "/<tenant>/" or "/" without tenant.
    """
    self.check_tenant(tenant_id)
    return f"/{tenant_id}/" if tenant_id is not None else "/"
