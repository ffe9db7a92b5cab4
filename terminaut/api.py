"""
Typed entry points for front ends (CLI, TUI, embedding hosts).

Raw path arguments are normalized here before they reach the store or the
search engine. Store operations use the given `store`, or the process-wide
one when it is omitted.
"""

from typing import List, Optional

from . import __version__
from . import paths as _paths
from .config import DEFAULT_SEARCH_LIMIT, SEARCH_CANDIDATE_FACTOR
from .models import DirectoryEntry, LaunchProfile, ProjectRoot, RecentEntry, SearchResult, TaggedPath
from .search import search_directories
from .storage import StateStore, get_default_store


def _store(store: Optional[StateStore]) -> StateStore:
    return store if store is not None else get_default_store()


def version() -> str:
    return __version__


def normalize_path(path: str) -> str:
    return _paths.normalize_path(path)


def list_directory(path: str) -> List[DirectoryEntry]:
    return _paths.list_directory(_paths.normalize_path(path))


def detect_projects(path: str) -> List[ProjectRoot]:
    return _paths.detect_projects(_paths.normalize_path(path))


# --- Favorites ---

def list_favorites(store: Optional[StateStore] = None) -> List[str]:
    return _store(store).list_favorites()


def add_favorite(path: str, store: Optional[StateStore] = None) -> None:
    _store(store).add_favorite(_paths.normalize_path(path))


def remove_favorite(path: str, store: Optional[StateStore] = None) -> None:
    _store(store).remove_favorite(_paths.normalize_path(path))


# --- Recents ---

def list_recents(store: Optional[StateStore] = None) -> List[RecentEntry]:
    return _store(store).list_recents()


def touch_recent(path: str, store: Optional[StateStore] = None) -> RecentEntry:
    return _store(store).touch_recent(_paths.normalize_path(path))


# --- Tags ---

def list_tags(store: Optional[StateStore] = None) -> List[TaggedPath]:
    return _store(store).list_tags()


def set_tag(path: str, tag: str, color: Optional[str] = None, store: Optional[StateStore] = None) -> TaggedPath:
    return _store(store).set_tag(_paths.normalize_path(path), tag, color)


def remove_tag(path: str, tag: str, store: Optional[StateStore] = None) -> None:
    _store(store).remove_tag(_paths.normalize_path(path), tag)


def tags_for(path: str, store: Optional[StateStore] = None) -> List[TaggedPath]:
    return _store(store).tags_for(_paths.normalize_path(path))


# --- Profiles ---

def list_profiles(store: Optional[StateStore] = None) -> List[LaunchProfile]:
    return _store(store).list_profiles()


def save_profile(
    name: str,
    id: Optional[str] = None,
    command: Optional[str] = None,
    working_dir: Optional[str] = None,
    terminal: Optional[str] = None,
    windows: Optional[int] = None,
    store: Optional[StateStore] = None,
) -> LaunchProfile:
    return _store(store).save_profile(
        id=id, name=name, command=command, working_dir=working_dir, terminal=terminal, windows=windows
    )


def delete_profile(profile_id: str, store: Optional[StateStore] = None) -> None:
    _store(store).delete_profile(profile_id)


# --- Search ---

def search(
    path: str,
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
    candidate_factor: int = SEARCH_CANDIDATE_FACTOR,
) -> List[SearchResult]:
    return search_directories(_paths.normalize_path(path), query, limit=limit, candidate_factor=candidate_factor)
