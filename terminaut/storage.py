import json
import logging
import threading
import time
import uuid
from pathlib import Path
from typing import Callable, List, Optional

# Import config variables
from . import config
from .config import RECENTS_MAX_SIZE, DEFAULT_TAG_COLOR
from .exceptions import MalformedStateError, NotFoundError, PersistenceWriteError, ValidationError
from .models import LaunchProfile, PersistedState, RecentEntry, TaggedPath

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
PersistErrorHook = Callable[[PersistenceWriteError], None]


def _utc_now() -> int:
    return int(time.time())


class StateStore:
    """
    Favorites, recents, tags and launch profiles, mirrored to one JSON file.

    One lock guards the whole aggregate. Reads copy out under the lock,
    mutations change it in place, and every mutation is followed by a full
    rewrite of the state file. A failed write is logged and recorded on the
    store (`last_persist_error`, `persist_failures`, `on_persist_error`) but
    never fails the call: the in-memory state stays authoritative.

    A store built with `path=None` lives only in memory.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        state: Optional[PersistedState] = None,
        clock: Optional[Clock] = None,
        on_persist_error: Optional[PersistErrorHook] = None,
    ):
        self.path = Path(path) if path is not None else None
        self._state = state if state is not None else PersistedState()
        self._clock = clock or _utc_now
        self._lock = threading.Lock()
        self._write_lock = threading.Lock() # Orders snapshots with their writes
        self.on_persist_error = on_persist_error
        self.last_persist_error: Optional[PersistenceWriteError] = None
        self.persist_failures = 0
        # Set when this store is a fallback for a state file that failed to load
        self.init_error: Optional[Exception] = None

    # --- Loading/Saving ---

    @classmethod
    def load(cls, path: Path, **kwargs) -> "StateStore":
        """
        Opens the store backed by `path`.
        If the file exists it must parse, otherwise MalformedStateError is raised.
        If it doesn't exist the store starts empty and the parent directory is created.
        """
        path = Path(path)
        if path.is_file():
            try:
                content = path.read_text(encoding='utf-8')
                data = json.loads(content)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                raise MalformedStateError(path, str(e)) from e
            state = PersistedState.from_dict(data, source=path)
            logger.debug("Loaded state from %s", path)
            return cls(path, state=state, **kwargs)

        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(path, **kwargs)

    @property
    def persistent(self) -> bool:
        return self.path is not None

    def snapshot(self) -> PersistedState:
        """Deep copy of the current aggregate."""
        with self._lock:
            return self._state.copy()

    def persist(self) -> bool:
        """
        Rewrites the state file from a snapshot of the in-memory state.

        Returns True on success (or for an in-memory store), False if the
        write failed. Failures are recorded, never raised.
        """
        if self.path is None:
            return True
        with self._write_lock:
            with self._lock:
                data = self._state.to_dict()
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2)
                return True
            except (OSError, TypeError, ValueError) as e:
                error = PersistenceWriteError(self.path, e)
                self.last_persist_error = error
                self.persist_failures += 1
                logger.warning("%s; keeping in-memory state", error)
                if self.on_persist_error is not None:
                    try:
                        self.on_persist_error(error)
                    except Exception:
                        logger.exception("on_persist_error hook failed")
                return False

    # --- Favorites ---

    def list_favorites(self) -> List[str]:
        with self._lock:
            return sorted(self._state.favorites)

    def add_favorite(self, path: str) -> None:
        with self._lock:
            if path not in self._state.favorites:
                self._state.favorites.append(path)
        self.persist()

    def remove_favorite(self, path: str) -> None:
        with self._lock:
            self._state.favorites = [p for p in self._state.favorites if p != path]
        self.persist()

    def is_favorite(self, path: str) -> bool:
        with self._lock:
            return path in self._state.favorites

    # --- Recents ---

    def list_recents(self) -> List[RecentEntry]:
        with self._lock:
            recents = [RecentEntry(e.path, e.last_opened_utc) for e in self._state.recents]
        recents.sort(key=lambda e: e.last_opened_utc, reverse=True)
        return recents

    def touch_recent(self, path: str) -> RecentEntry:
        """Moves `path` to the front of the recents, pruning the oldest beyond the cap."""
        entry = RecentEntry(path=path, last_opened_utc=int(self._clock()))
        with self._lock:
            recents = [e for e in self._state.recents if e.path != path]
            recents.append(entry)
            if len(recents) > RECENTS_MAX_SIZE:
                recents.sort(key=lambda e: e.last_opened_utc, reverse=True)
                del recents[RECENTS_MAX_SIZE:]
            self._state.recents = recents
        self.persist()
        return RecentEntry(entry.path, entry.last_opened_utc)

    # --- Tags ---

    def list_tags(self) -> List[TaggedPath]:
        with self._lock:
            return [TaggedPath(t.path, t.tag, t.color) for t in self._state.tags]

    def set_tag(self, path: str, tag: str, color: Optional[str] = None) -> TaggedPath:
        """Upserts the (path, tag) pair; tag names match case-insensitively and only the color changes."""
        if not tag or not tag.strip():
            raise ValidationError("Tag name cannot be empty.")
        color = color or DEFAULT_TAG_COLOR
        with self._lock:
            existing = next((t for t in self._state.tags if t.matches(path, tag)), None)
            if existing is not None:
                existing.color = color
                stored = existing
            else:
                stored = TaggedPath(path=path, tag=tag, color=color)
                self._state.tags.append(stored)
            result = TaggedPath(stored.path, stored.tag, stored.color)
        self.persist()
        return result

    def remove_tag(self, path: str, tag: str) -> None:
        with self._lock:
            self._state.tags = [t for t in self._state.tags if not t.matches(path, tag)]
        self.persist()

    def tags_for(self, path: str) -> List[TaggedPath]:
        with self._lock:
            return [TaggedPath(t.path, t.tag, t.color) for t in self._state.tags if t.path == path]

    # --- Profiles ---

    def list_profiles(self) -> List[LaunchProfile]:
        with self._lock:
            profiles = [_copy_profile(p) for p in self._state.profiles]
        profiles.sort(key=lambda p: p.name.lower())
        return profiles

    def get_profile(self, profile_id: str) -> LaunchProfile:
        profile_id = _lookup_id(profile_id)
        with self._lock:
            for profile in self._state.profiles:
                if profile.id == profile_id:
                    return _copy_profile(profile)
        raise NotFoundError(f"Profile not found: {profile_id}")

    def save_profile(
        self,
        id: Optional[str] = None,
        name: str = "",
        command: Optional[str] = None,
        working_dir: Optional[str] = None,
        terminal: Optional[str] = None,
        windows: Optional[int] = None,
    ) -> LaunchProfile:
        """
        Inserts or replaces a launch profile.

        The name is trimmed and must not be empty, windows is clamped to 1..10
        and a fresh id is generated when none is given. A profile whose id is
        already stored is replaced at the same position.
        """
        # LaunchProfile validates the name, canonicalizes the id and clamps windows
        profile = LaunchProfile(
            id=id,
            name=name,
            command=command,
            working_dir=working_dir,
            terminal=terminal,
            windows=windows,
        )
        with self._lock:
            for index, existing in enumerate(self._state.profiles):
                if existing.id == profile.id:
                    self._state.profiles[index] = profile
                    break
            else:
                self._state.profiles.append(profile)
            result = _copy_profile(profile)
        self.persist()
        return result

    def delete_profile(self, profile_id: str) -> None:
        profile_id = _lookup_id(profile_id)
        with self._lock:
            before = len(self._state.profiles)
            self._state.profiles = [p for p in self._state.profiles if p.id != profile_id]
            if len(self._state.profiles) == before:
                raise NotFoundError(f"Profile not found: {profile_id}")
        self.persist()


def _copy_profile(profile: LaunchProfile) -> LaunchProfile:
    return LaunchProfile(
        id=profile.id,
        name=profile.name,
        command=profile.command,
        working_dir=profile.working_dir,
        terminal=profile.terminal,
        windows=profile.windows,
    )


def _lookup_id(profile_id: str) -> str:
    # An id that isn't a UUID can't name a stored profile
    try:
        return str(uuid.UUID(str(profile_id)))
    except ValueError:
        raise NotFoundError(f"Profile not found: {profile_id}")


# --- Process-wide store ---

_default_store: Optional[StateStore] = None
_default_store_lock = threading.Lock()


def get_default_store() -> StateStore:
    """
    Returns the process-wide store, loading config.STATE_FILE on first use.

    Initialization runs once even when several threads race to it. If the
    state file can't be loaded the error is logged and an empty in-memory
    store (with `init_error` set) is installed instead, so the process keeps
    working without touching the unreadable file.
    """
    global _default_store
    store = _default_store
    if store is not None:
        return store
    with _default_store_lock:
        if _default_store is None:
            try:
                _default_store = StateStore.load(config.STATE_FILE)
            except (MalformedStateError, OSError) as e:
                logger.error("Could not initialize state from %s: %s", config.STATE_FILE, e)
                fallback = StateStore(path=None)
                fallback.init_error = e
                _default_store = fallback
        return _default_store


def reset_default_store() -> None:
    """Forgets the process-wide store so the next access loads it again."""
    global _default_store
    with _default_store_lock:
        _default_store = None
