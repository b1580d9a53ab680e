import errno


class FileManagerError(Exception):
    """Base error for file manager operations, carries an HTTP status."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'success': False, 'error': self.message}


class InvalidRequest(FileManagerError):
    status_code = 400


class NotFound(FileManagerError):
    status_code = 404


class Conflict(FileManagerError):
    status_code = 409


class IOFailure(FileManagerError):
    status_code = 500


def from_os_error(exc, action):
    """Translates an OSError into the matching FileManagerError."""
    if isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
        return NotFound(f"{action}: path does not exist")
    if isinstance(exc, FileExistsError) or exc.errno == errno.EEXIST:
        return Conflict(f"{action}: destination already exists")
    reason = exc.strerror or str(exc)
    return IOFailure(f"{action}: {reason}")
