"""
Client-side selection and view state.

The browser keeps its UI state in a reducer: a single immutable state
object advanced only by the actions below. ``reduce`` is pure, ``Store``
serialises dispatches so no two transitions ever interleave.
"""
import threading
from dataclasses import dataclass, field, replace
from typing import Tuple

from .entries import FileEntry
from .lister import SORT_KEYS, SORT_ORDERS, filter_entries, sort_entries

VIEW_MODES = ('table', 'grid', 'compact')


@dataclass(frozen=True)
class FileManagerState:
    current_path: str = '/'
    selected_files: Tuple[FileEntry, ...] = ()
    sort_by: str = 'type'
    sort_order: str = 'asc'
    search_query: str = ''
    show_hidden_files: bool = False
    view_mode: str = 'table'

    @property
    def selected_ids(self):
        return [entry.id for entry in self.selected_files]

    def is_selected(self, entry):
        return any(selected.id == entry.id for selected in self.selected_files)


@dataclass(frozen=True)
class SetCurrentPath:
    path: str


@dataclass(frozen=True)
class SetSelectedFiles:
    files: Tuple[FileEntry, ...]


@dataclass(frozen=True)
class ToggleFileSelection:
    file: FileEntry


@dataclass(frozen=True)
class ResetSelection:
    pass


@dataclass(frozen=True)
class SetSort:
    sort_by: str
    sort_order: str


@dataclass(frozen=True)
class SetSearchQuery:
    query: str


@dataclass(frozen=True)
class ToggleHiddenFiles:
    pass


@dataclass(frozen=True)
class SetViewMode:
    mode: str


@dataclass(frozen=True)
class SetFiles:
    files: Tuple[FileEntry, ...] = field(default=())


def reduce(state, action):
    """Returns the state that results from applying action to state."""
    if isinstance(action, SetCurrentPath):
        return replace(state, current_path=action.path)

    if isinstance(action, SetSelectedFiles):
        return replace(state, selected_files=tuple(action.files))

    if isinstance(action, ToggleFileSelection):
        if state.is_selected(action.file):
            remaining = tuple(f for f in state.selected_files if f.id != action.file.id)
            return replace(state, selected_files=remaining)
        return replace(state, selected_files=state.selected_files + (action.file,))

    if isinstance(action, ResetSelection):
        return replace(state, selected_files=())

    if isinstance(action, SetSort):
        if action.sort_by not in SORT_KEYS:
            raise ValueError(f"Invalid sort key: {action.sort_by}")
        if action.sort_order not in SORT_ORDERS:
            raise ValueError(f"Invalid sort order: {action.sort_order}")
        return replace(state, sort_by=action.sort_by, sort_order=action.sort_order)

    if isinstance(action, SetSearchQuery):
        return replace(state, search_query=action.query)

    if isinstance(action, ToggleHiddenFiles):
        return replace(state, show_hidden_files=not state.show_hidden_files)

    if isinstance(action, SetViewMode):
        if action.mode not in VIEW_MODES:
            raise ValueError(f"Invalid view mode: {action.mode}")
        return replace(state, view_mode=action.mode)

    if isinstance(action, SetFiles):
        # Selection belongs to the listing it was made in
        return replace(state, selected_files=())

    raise TypeError(f"Unknown action: {action!r}")


class Store:
    """Holds the current state and applies actions one at a time."""

    def __init__(self, state=None):
        self._state = state or FileManagerState()
        self._lock = threading.Lock()
        self._listeners = []

    @property
    def state(self):
        return self._state

    def subscribe(self, listener):
        """Registers listener(state); returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action):
        with self._lock:
            self._state = reduce(self._state, action)
            state = self._state
        for listener in list(self._listeners):
            listener(state)
        return state


def displayed_files(files, state):
    """The listing as the UI shows it: searched, hidden files dropped, sorted."""
    shown = filter_entries(files, state.search_query)
    if not state.show_hidden_files:
        shown = [entry for entry in shown if not entry.is_hidden]
    return sort_entries(shown, state.sort_by, state.sort_order)


def _index_of(entries, entry):
    for index, candidate in enumerate(entries):
        if candidate.id == entry.id:
            return index
    return -1


def range_select(displayed, selected, clicked):
    """
    Returns the contiguous run of displayed entries between the most
    recently selected entry and the clicked one, both ends included.
    """
    end = _index_of(displayed, clicked)
    if end < 0:
        return []
    if not selected:
        return [clicked]
    start = _index_of(displayed, selected[-1])
    if start < 0:
        return [displayed[end]]
    low, high = min(start, end), max(start, end)
    return list(displayed[low:high + 1])


def click(store, displayed, entry, toggle=False, extend=False):
    """Applies a click on entry: toggle (ctrl), extend (shift) or single select."""
    if toggle:
        return store.dispatch(ToggleFileSelection(entry))
    if extend and store.state.selected_files:
        span = range_select(displayed, store.state.selected_files, entry)
        return store.dispatch(SetSelectedFiles(tuple(span)))
    return store.dispatch(SetSelectedFiles((entry,)))


def next_sort(state, sort_by):
    """Sort action for a click on a column header."""
    if state.sort_by == sort_by and state.sort_order == 'desc':
        return SetSort(sort_by, 'asc')
    return SetSort(sort_by, 'desc')


def parent_path(path):
    parts = [part for part in path.split('/') if part]
    return '/' + '/'.join(parts[:-1])


def breadcrumbs(path):
    """[(label, path), ...] for each segment of path."""
    parts = [part for part in path.split('/') if part]
    return [(part, '/' + '/'.join(parts[:i + 1])) for i, part in enumerate(parts)]


def format_file_size(size):
    """Formats bytes into a human-readable string, '-' for nothing."""
    if not size:
        return '-'
    suffixes = ['B', 'KB', 'MB', 'GB', 'TB']
    value = float(size)
    i = 0
    while value >= 1024 and i < len(suffixes) - 1:
        value /= 1024.0
        i += 1
    return f"{round(value, 2):g} {suffixes[i]}"


def selection_stats(selected):
    folders = [entry for entry in selected if entry.is_directory]
    files = [entry for entry in selected if not entry.is_directory]
    total_size = sum(entry.size or 0 for entry in files)
    return {
        'count': len(selected),
        'folders': len(folders),
        'files': len(files),
        'total_size': total_size,
        'total_size_label': format_file_size(total_size),
    }
