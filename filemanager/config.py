import os


def _env(name, default=None):
    return os.environ.get(f"FILEMANAGER_{name}", default)


def _env_float(name, default):
    value = _env(name)
    if value is None or value == '':
        return default
    return float(value)


class Config:
    """Defaults, overridable through FILEMANAGER_* environment variables."""

    # Vercel only allows writes under /tmp
    ROOT_DIR = _env('ROOT_DIR', '/tmp/my_files')
    MAX_CONTENT_LENGTH = int(_env('MAX_CONTENT_LENGTH', 100 * 1024 * 1024))  # 100MB max upload
    MAX_DOWNLOAD_SIZE = int(_env('MAX_DOWNLOAD_SIZE', 100 * 1024 * 1024))
    FS_CALL_TIMEOUT = _env_float('FS_CALL_TIMEOUT', 30.0)
    URL_PREFIX = _env('URL_PREFIX', '/api/filemanager')
    LOG_LEVEL = _env('LOG_LEVEL', 'INFO')
