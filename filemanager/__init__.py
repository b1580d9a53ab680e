from .app import create_app
from .entries import FileEntry
from .errors import Conflict, FileManagerError, InvalidRequest, IOFailure, NotFound
from .lister import DirectoryLister
from .mutator import FilesystemMutator
from .transfer import TransferAssembler

__version__ = '0.1.0'
