import base64
import logging
from dataclasses import dataclass, field

from .entries import DEFAULT_MIME_TYPE, get_mime_type
from .errors import InvalidRequest, NotFound, from_os_error
from .fsops import FilesystemGateway
from .paths import resolve_path

logger = logging.getLogger(__name__)


@dataclass
class SingleFilePayload:
    file_name: str
    content: bytes
    size: int
    mime_type: str

    def to_dict(self):
        return {
            'fileName': self.file_name,
            'buffer': base64.b64encode(self.content).decode('ascii'),
            'size': self.size,
            'mimeType': self.mime_type,
        }


@dataclass
class ArchiveManifest:
    """Entries to be bundled by the client, which does the compressing."""

    files: list = field(default_factory=list)

    def to_dict(self):
        return {'files': list(self.files), 'totalFiles': len(self.files)}


class TransferAssembler:
    """Packages selected entries for download."""

    def __init__(self, root, timeout=None, max_size=None):
        self.root = root
        self.fs = FilesystemGateway(timeout)
        self.max_size = max_size

    def prepare(self, entries, as_archive=False):
        if not entries:
            raise InvalidRequest('No files provided')
        if as_archive and len(entries) > 1:
            return self._manifest(entries)
        if len(entries) != 1:
            raise InvalidRequest('Single file download requires exactly one file')
        return self._read_single(entries[0])

    def _manifest(self, entries):
        files = []
        for entry in entries:
            full_path = resolve_path(self.root, entry.path)
            files.append({
                'name': entry.name,
                'path': str(full_path),
                'mimeType': entry.mime_type or get_mime_type(entry.name),
            })
        logger.info(f"Prepared archive manifest for {len(files)} file(s)")
        return ArchiveManifest(files)

    def _read_single(self, entry):
        full_path = resolve_path(self.root, entry.path)
        if not self.fs.call(full_path.exists):
            raise NotFound(f"File not found: {entry.path}")
        if self.fs.call(full_path.is_dir):
            raise InvalidRequest('Directories can only be downloaded as an archive')

        try:
            size = self.fs.call(full_path.stat).st_size
            if self.max_size is not None and size > self.max_size:
                raise InvalidRequest(f"File is too large to download ({size} bytes)")
            content = self.fs.call(full_path.read_bytes)
        except OSError as e:
            logger.error(f"Download error for {entry.path}: {e}")
            raise from_os_error(e, 'Failed to read file')

        return SingleFilePayload(
            file_name=entry.name,
            content=content,
            size=size,
            mime_type=entry.mime_type or get_mime_type(entry.name) or DEFAULT_MIME_TYPE,
        )
