from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


DEFAULT_MIME_TYPE = 'application/octet-stream'

MIME_TYPES = {
    'txt': 'text/plain',
    'md': 'text/markdown',
    'pdf': 'application/pdf',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'svg': 'image/svg+xml',
    'mp3': 'audio/mpeg',
    'wav': 'audio/wav',
    'flac': 'audio/flac',
    'mp4': 'video/mp4',
    'avi': 'video/x-msvideo',
    'mov': 'video/quicktime',
    'zip': 'application/zip',
    'rar': 'application/x-rar-compressed',
    '7z': 'application/x-7z-compressed',
    'js': 'application/javascript',
    'ts': 'application/typescript',
    'py': 'text/x-python',
    'java': 'text/x-java-source',
    'cpp': 'text/x-c++src',
    'css': 'text/css',
    'html': 'text/html',
    'htm': 'text/html',
    'json': 'application/json',
}

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def get_extension(name):
    """Returns the lowercased suffix after the last dot, '' if there is none."""
    _, dot, tail = name.rpartition('.')
    if not dot:
        return ''
    return tail.lower()


def get_mime_type(name):
    return MIME_TYPES.get(get_extension(name), DEFAULT_MIME_TYPE)


@dataclass(frozen=True)
class FileEntry:
    """One file or directory as surfaced by a listing."""

    id: str
    name: str
    path: str
    is_directory: bool
    last_modified: datetime = field(default=EPOCH)
    size: int = 0
    extension: Optional[str] = None
    mime_type: Optional[str] = None

    @classmethod
    def from_stat(cls, name, rel_path, st, is_directory):
        return cls(
            id=str(st.st_ino),
            name=name,
            path=rel_path,
            is_directory=is_directory,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            size=0 if is_directory else st.st_size,
            extension=None if is_directory else get_extension(name),
            mime_type=None if is_directory else get_mime_type(name),
        )

    @property
    def is_hidden(self):
        return self.name.startswith('.')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'path': self.path,
            'isDirectory': self.is_directory,
            'lastModified': self.last_modified.isoformat(),
            'size': self.size,
            'extension': self.extension,
            'mimeType': self.mime_type,
        }

    @classmethod
    def from_dict(cls, data):
        """Builds an entry from the client's JSON shape.

        Only ``path`` is required; everything else is informational and
        gets defaults when the client omits it.
        """
        path = data.get('path')
        if not isinstance(path, str) or not path:
            raise ValueError('entry is missing a path')
        if not path.startswith('/'):
            path = '/' + path
        name = data.get('name') or path.rstrip('/').rsplit('/', 1)[-1] or '/'
        last_modified = EPOCH
        raw_modified = data.get('lastModified')
        if isinstance(raw_modified, str) and raw_modified:
            try:
                last_modified = datetime.fromisoformat(raw_modified.replace('Z', '+00:00'))
            except ValueError:
                last_modified = EPOCH
        is_directory = bool(data.get('isDirectory', False))
        return cls(
            id=str(data.get('id', '')),
            name=name,
            path=path,
            is_directory=is_directory,
            last_modified=last_modified,
            size=int(data.get('size') or 0),
            extension=data.get('extension'),
            mime_type=data.get('mimeType'),
        )
