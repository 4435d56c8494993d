import re
from typing import Optional
from ..errors import InvalidPath, Unauthorized

SEPARATOR = "/"
USERS_PREFIX = "users/"

# characters that are not accepted in keys: shell/glob specials, quotes, backslash
# and ASCII control characters
FORBIDDEN_CHARS = re.compile(r'[*?|<>"\\\x00-\x1f\x7f]')


def sanitize_path(path: str) -> str:
  """Clean up a caller supplied path so that it can be appended to a namespace.

  Line breaks are removed and leading slashes are stripped, so that an absolute
  looking path becomes relative. A trailing slash is preserved.

  Args:
      path (str): The relative path.

  Raises:
      InvalidPath: When the path is None, contains a '.' or '..' component,
      an empty component or forbidden characters.

  Returns:
      str: The sanitized path, possibly empty.
  """
  if path is None:
    raise InvalidPath("Invalid path: None")
  path = path.replace("\r", "").replace("\n", "").lstrip(SEPARATOR)
  if not path:
    return ""
  parts = path.split(SEPARATOR)
  # a trailing separator yields one last empty part, which is allowed
  if parts[-1] == "":
    parts = parts[:-1]
  for part in parts:
    if part == "..":
      raise InvalidPath("Invalid path: '..' not allowed")
    if part == ".":
      raise InvalidPath("Invalid path: '.' not allowed")
    if part == "":
      raise InvalidPath("Invalid path: empty path component")
  if FORBIDDEN_CHARS.search(path):
    raise InvalidPath("Invalid path: contains forbidden characters")
  return path


class NamespaceResolver:
  """Maps caller supplied relative paths to absolute keys in a user namespace.

  Each user owns every key starting with `users/<user_id>/`. The user id must
  come from the authentication layer, never from the request payload.
  """

  def __init__(self, root: str = USERS_PREFIX):
    self.root = root if root.endswith(SEPARATOR) else f"{root}{SEPARATOR}"

  def namespace(self, user_id: str) -> str:
    """Get the key prefix of a user namespace.

    Args:
        user_id (str): The user identifier asserted by the authentication layer.

    Raises:
        Unauthorized: When the user identifier is missing or cannot be used as
        a single path segment.

    Returns:
        str: The namespace prefix, ending with the separator.
    """
    if not user_id:
      raise Unauthorized("Missing user identity")
    if SEPARATOR in user_id or user_id in (".", "..") or FORBIDDEN_CHARS.search(user_id):
      raise Unauthorized("Invalid user identity")
    return f"{self.root}{user_id}{SEPARATOR}"

  def resolve_key(self, user_id: str, path: Optional[str] = None) -> str:
    """Get the absolute key of a path in the user namespace.

    Args:
        user_id (str): The user identifier.
        path (str, optional): The key relative to the namespace. Defaults to None,
        which resolves to the namespace itself.

    Returns:
        str: The absolute key.
    """
    namespace = self.namespace(user_id)
    if not path:
      return namespace
    return f"{namespace}{sanitize_path(path)}"

  def resolve_prefix(self, user_id: str, prefix: Optional[str] = None) -> str:
    """Get the absolute prefix of a folder in the user namespace.

    Args:
        user_id (str): The user identifier.
        prefix (str, optional): The folder relative to the namespace. Defaults to None.

    Returns:
        str: The absolute prefix, always ending with the separator.
    """
    key = self.resolve_key(user_id, prefix)
    return key if key.endswith(SEPARATOR) else f"{key}{SEPARATOR}"

  def to_relative(self, user_id: str, key: str) -> str:
    """Strip the user namespace from an absolute key.

    Args:
        user_id (str): The user identifier.
        key (str): An absolute key within the user namespace.

    Returns:
        str: The key relative to the namespace.
    """
    namespace = self.namespace(user_id)
    if not key.startswith(namespace):
      raise ValueError(f"Key {key} is outside of the namespace {namespace}")
    return key[len(namespace):]
