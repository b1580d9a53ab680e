import logging
from pathlib import Path, PurePosixPath

from werkzeug.security import safe_join

from .errors import InvalidRequest

logger = logging.getLogger(__name__)


def normalize_root(root):
    """Returns the absolute, symlink-free form of the configured root."""
    return Path(root).expanduser().resolve()


def is_within(root, path):
    return path == root or root in path.parents


def resolve_path(root, rel_path):
    """
    Resolves a client path (``/docs/a.txt``) against the root directory.

    The leading slash is stripped and the remainder joined under the root.
    Anything that would land outside the root, directly or through a
    symlink, is refused with InvalidRequest.
    """
    if rel_path is None:
        rel_path = '/'
    if not isinstance(rel_path, str):
        raise InvalidRequest('Path must be a string')
    if '\0' in rel_path:
        raise InvalidRequest('Invalid path')

    cleaned = rel_path.strip().replace('\\', '/').lstrip('/')
    if not cleaned or cleaned == '.':
        return root

    joined = safe_join(str(root), cleaned)
    if joined is None:
        logger.warning(f"Path traversal attempt: {rel_path}")
        raise InvalidRequest('Path is outside the root directory')

    full_path = Path(joined)
    # The joined path may still escape through a symlinked component
    if not is_within(root, full_path.resolve()):
        logger.warning(f"Symlink escape attempt: {rel_path}")
        raise InvalidRequest('Path is outside the root directory')
    return full_path


def to_relative(root, full_path):
    """Gets the root-relative path of full_path, always starting with '/'."""
    relative = PurePosixPath(Path(full_path).relative_to(root).as_posix())
    if str(relative) == '.':
        return '/'
    return '/' + str(relative)


def base_name(name):
    """Reduces a client-supplied file name to its last path component."""
    if not isinstance(name, str):
        return ''
    return name.replace('\\', '/').rstrip('/').rsplit('/', 1)[-1].strip()


def check_plain_name(name):
    """Validates that name can be used as a single directory entry."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidRequest('Name is required')
    name = name.strip()
    if '/' in name or '\\' in name or '\0' in name or name in ('.', '..'):
        raise InvalidRequest(f"Invalid name: {name}")
    return name
