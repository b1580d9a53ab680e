import logging
import os

from .entries import FileEntry
from .errors import InvalidRequest, NotFound, from_os_error
from .fsops import FilesystemGateway
from .paths import resolve_path, to_relative

logger = logging.getLogger(__name__)

SORT_KEYS = ('name', 'size', 'lastModified', 'type')
SORT_ORDERS = ('asc', 'desc')


def _name_key(entry):
    return (entry.name.casefold(), entry.name)


def _primary_key(sort_by):
    if sort_by == 'name':
        return lambda entry: ()
    if sort_by == 'type':
        return lambda entry: ((entry.extension or '').casefold(),)
    if sort_by == 'size':
        return lambda entry: (entry.size or 0,)
    if sort_by == 'lastModified':
        return lambda entry: (entry.last_modified.timestamp() if entry.last_modified else 0,)
    raise InvalidRequest(f"Invalid sortBy: {sort_by}")


def filter_entries(entries, search):
    """Keeps entries whose name contains search, case-insensitively."""
    if not search:
        return list(entries)
    needle = search.casefold()
    return [entry for entry in entries if needle in entry.name.casefold()]


def sort_entries(entries, sort_by='name', sort_order='asc'):
    """
    Sorts entries by one of SORT_KEYS.

    Ties on the chosen key fall back to the name, so the result does not
    depend on enumeration order and 'desc' is the exact reverse of 'asc'.
    """
    if sort_order not in SORT_ORDERS:
        raise InvalidRequest(f"Invalid sortOrder: {sort_order}")
    primary = _primary_key(sort_by)
    return sorted(
        entries,
        key=lambda entry: primary(entry) + _name_key(entry),
        reverse=sort_order == 'desc',
    )


def stat_entry(root, full_path):
    """Builds a FileEntry for full_path from a fresh stat (symlinks followed)."""
    st = os.stat(full_path)
    is_directory = os.path.isdir(full_path)
    return FileEntry.from_stat(full_path.name, to_relative(root, full_path), st, is_directory)


class DirectoryLister:
    """Lists the immediate children of a directory under the root."""

    def __init__(self, root, timeout=None):
        self.root = root
        self.fs = FilesystemGateway(timeout)

    def _read_children(self, target_dir):
        entries = []
        with os.scandir(target_dir) as it:
            for dir_entry in it:
                child = target_dir / dir_entry.name
                try:
                    entries.append(stat_entry(self.root, child))
                except OSError as e:
                    # Vanished or dangling entries are skipped, not fatal
                    logger.warning(f"Skipping {child}: {e}")
        return entries

    def list(self, rel_path='/', search='', sort_by='name', sort_order='asc'):
        # Validate query parameters before touching the disk
        _primary_key(sort_by)
        if sort_order not in SORT_ORDERS:
            raise InvalidRequest(f"Invalid sortOrder: {sort_order}")

        target_dir = resolve_path(self.root, rel_path)
        if not self.fs.call(target_dir.exists):
            raise NotFound('Path does not exist')
        if not self.fs.call(target_dir.is_dir):
            raise NotFound('Path is not a directory')

        try:
            entries = self.fs.call(self._read_children, target_dir)
        except OSError as e:
            logger.error(f"List error for {target_dir}: {e}")
            raise from_os_error(e, 'Failed to read directory')

        entries = filter_entries(entries, search)
        return sort_entries(entries, sort_by, sort_order)
