import errno
import logging
import os
import posixpath
import shutil
import uuid
from dataclasses import dataclass, field

from .errors import (
    Conflict, FileManagerError, InvalidRequest, NotFound, from_os_error,
)
from .fsops import FilesystemGateway
from .lister import stat_entry
from .paths import base_name, check_plain_name, resolve_path

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """An uploaded file: the name the client sent and its full content."""

    name: str
    content: bytes


@dataclass
class UploadedFile:
    entry: object
    original_name: str

    def to_dict(self):
        data = self.entry.to_dict()
        data['originalName'] = self.original_name
        data['mimeType'] = self.entry.mime_type
        return data


@dataclass
class BatchFailure:
    item: str
    error: str
    kind: str = 'path'

    def to_dict(self):
        return {self.kind: self.item, 'error': self.error}


@dataclass
class BatchResult:
    """Per-item outcome of a fail-soft batch operation."""

    succeeded: list = field(default_factory=list)
    failed: list = field(default_factory=list)

    @property
    def total(self):
        return len(self.succeeded) + len(self.failed)


def _remove(path):
    """Recursively removes path; a missing path is not an error."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif os.path.lexists(path):
        path.unlink()


def _link_exclusive(source, dest):
    """Publishes source at dest, failing with FileExistsError if dest is taken."""
    try:
        os.link(source, dest)
    except OSError as e:
        if e.errno not in (errno.EPERM, errno.EOPNOTSUPP, errno.ENOTSUP, errno.EXDEV):
            raise
        # No hard links on this filesystem
        if os.path.lexists(dest):
            raise FileExistsError(errno.EEXIST, 'File exists', str(dest))
        os.replace(source, dest)


def _copy(source, dest):
    if source.is_dir() and not source.is_symlink():
        shutil.copytree(source, dest, symlinks=True)
    else:
        shutil.copy2(source, dest, follow_symlinks=False)


class FilesystemMutator:
    """Create, delete, rename and upload under a single root directory."""

    def __init__(self, root, timeout=None):
        self.root = root
        self.fs = FilesystemGateway(timeout)

    def create_folder(self, target_dir, new_name):
        """Creates target_dir/new_name (and any missing parents)."""
        if not isinstance(new_name, str) or not new_name.strip():
            raise InvalidRequest('Folder name is required')
        segments = new_name.strip().strip('/').split('/')
        try:
            segments = [check_plain_name(segment) for segment in segments]
        except InvalidRequest:
            raise InvalidRequest(f"Invalid folder name: {new_name}")
        new_folder = resolve_path(self.root, posixpath.join(target_dir or '/', *segments))

        try:
            self.fs.call(new_folder.mkdir, parents=True, exist_ok=True)
            entry = self.fs.call(stat_entry, self.root, new_folder)
        except OSError as e:
            logger.error(f"Create folder error: {e}")
            raise from_os_error(e, 'Failed to create folder')

        logger.info(f"Created folder {entry.path}")
        return entry

    def _delete_one(self, entry):
        full_path = resolve_path(self.root, entry.path)
        if full_path == self.root:
            raise InvalidRequest('Refusing to delete the root directory')
        self.fs.call(_remove, full_path)

    def delete(self, entries):
        """Deletes every entry it can; failures are collected, not raised."""
        result = BatchResult()
        for entry in entries:
            try:
                self._delete_one(entry)
            except FileManagerError as e:
                logger.warning(f"Delete refused for {entry.path}: {e.message}")
                result.failed.append(BatchFailure(entry.path, e.message))
            except OSError as e:
                logger.error(f"Delete error for {entry.path}: {e}")
                result.failed.append(BatchFailure(entry.path, from_os_error(e, 'Failed to delete').message))
            else:
                result.succeeded.append(entry)

        logger.info(f"Deleted {len(result.succeeded)} item(s), {len(result.failed)} failed")
        return result

    def _move(self, source, dest):
        try:
            os.rename(source, dest)
            return
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise

        # Different device: copy then delete the source
        logger.info(f"Cross-device rename, copying {source} to {dest}")
        try:
            _copy(source, dest)
        except OSError:
            _remove(dest)
            raise
        _remove(source)

    def rename(self, entry, new_name):
        """Renames entry within its parent directory."""
        new_name = check_plain_name(new_name)
        source = resolve_path(self.root, entry.path)
        if source == self.root:
            raise InvalidRequest('Cannot rename the root directory')
        parent = posixpath.dirname(entry.path.rstrip('/')) or '/'
        dest = resolve_path(self.root, posixpath.join(parent, new_name))

        if not self.fs.call(os.path.lexists, source):
            raise NotFound(f"Source does not exist: {entry.path}")
        if self.fs.call(os.path.lexists, dest):
            raise Conflict('Destination already exists')

        try:
            self.fs.call(self._move, source, dest)
            renamed = self.fs.call(stat_entry, self.root, dest)
        except OSError as e:
            logger.error(f"Rename error: {e}")
            raise from_os_error(e, 'Failed to rename')

        logger.info(f"Renamed {entry.path} to {renamed.path}")
        return renamed

    def _write(self, path, content, overwrite):
        """Writes content to a temporary sibling, then moves it onto path.

        A failed write leaves neither a partial file nor a clobbered original.
        """
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.upload")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(content)
            if overwrite:
                os.replace(tmp_path, path)
            else:
                _link_exclusive(tmp_path, path)
        finally:
            if os.path.lexists(tmp_path):
                os.unlink(tmp_path)

    def upload(self, target_dir, incoming_files, overwrite=False):
        """
        Writes each incoming file into target_dir.

        Names are reduced to their base name. An existing file of the same
        name is a per-file Conflict unless overwrite is set. One bad file
        does not stop the rest of the batch.
        """
        if not incoming_files:
            raise InvalidRequest('No files provided')
        target = resolve_path(self.root, target_dir)
        if not self.fs.call(target.is_dir):
            raise NotFound('Target directory does not exist')

        result = BatchResult()
        for incoming in incoming_files:
            safe_name = base_name(incoming.name)
            try:
                check_plain_name(safe_name)
                upload_path = resolve_path(self.root, posixpath.join(target_dir or '/', safe_name))
                self.fs.call(self._write, upload_path, incoming.content, overwrite)
                entry = self.fs.call(stat_entry, self.root, upload_path)
            except FileManagerError as e:
                logger.warning(f"Upload refused for {incoming.name}: {e.message}")
                result.failed.append(BatchFailure(incoming.name, e.message, kind='name'))
            except OSError as e:
                logger.error(f"Upload error for {incoming.name}: {e}")
                error = from_os_error(e, f"Failed to write {safe_name}")
                result.failed.append(BatchFailure(incoming.name, error.message, kind='name'))
            else:
                result.succeeded.append(UploadedFile(entry, incoming.name))

        logger.info(f"Uploaded {len(result.succeeded)} file(s) to {target_dir}, {len(result.failed)} failed")
        return result
