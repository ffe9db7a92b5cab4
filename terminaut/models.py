import copy
import time
import uuid
from dataclasses import dataclass, field, asdict, fields
from typing import Optional, List, Dict, Any

from .config import (
    DEFAULT_TAG_COLOR,
    DEFAULT_PROFILE_NAME,
    PROFILE_WINDOWS_MIN,
    PROFILE_WINDOWS_MAX,
)
from .exceptions import ValidationError, MalformedStateError


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys the dataclass doesn't know about (older/newer state files)."""
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


def clamp_windows(windows: Optional[int]) -> int:
    """Window count for a profile, defaulting to 1 and kept within 1..10."""
    if windows is None:
        return PROFILE_WINDOWS_MIN
    return max(PROFILE_WINDOWS_MIN, min(PROFILE_WINDOWS_MAX, int(windows)))


def canonical_profile_id(profile_id: Optional[str]) -> str:
    """Canonical UUID string for profile_id, or a fresh one when it is missing."""
    if profile_id is None or profile_id == "":
        return str(uuid.uuid4())
    try:
        return str(uuid.UUID(str(profile_id)))
    except ValueError:
        raise ValidationError(f"Invalid profile id: {profile_id!r}")


@dataclass
class RecentEntry:
    """A directory opened recently."""
    path: str
    last_opened_utc: int = field(default_factory=lambda: int(time.time())) # Unix seconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TaggedPath:
    """A user-assigned colored tag on a directory."""
    path: str
    tag: str
    color: str = DEFAULT_TAG_COLOR

    def __post_init__(self):
        if not isinstance(self.path, str) or not isinstance(self.tag, str):
            raise ValidationError("Tag path and name must be strings.")
        if not self.tag.strip():
            raise ValidationError("Tag name cannot be empty.")
        if not self.color:
            self.color = DEFAULT_TAG_COLOR
        elif not isinstance(self.color, str):
            raise ValidationError("Tag color must be a string.")

    def matches(self, path: str, tag: str) -> bool:
        # Path is compared exactly, tag identity ignores case
        return self.path == path and self.tag.casefold() == tag.casefold()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LaunchProfile:
    """A reusable terminal launch configuration."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = DEFAULT_PROFILE_NAME
    command: Optional[str] = None
    working_dir: Optional[str] = None
    terminal: Optional[str] = None
    windows: int = PROFILE_WINDOWS_MIN

    def __post_init__(self):
        if self.name is not None and not isinstance(self.name, str):
            raise ValidationError("Profile name must be a string.")
        for value in (self.command, self.working_dir, self.terminal):
            if value is not None and not isinstance(value, str):
                raise ValidationError("Profile command, working_dir and terminal must be strings.")
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Profile name cannot be empty.")
        self.id = canonical_profile_id(self.id)
        self.windows = clamp_windows(self.windows)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchResult:
    """One ranked hit from the directory search."""
    path: str
    name: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DirectoryEntry:
    """One entry of a flat directory listing."""
    name: str
    path: str
    is_dir: bool
    mod_date: Optional[int] = None # Unix seconds, if available

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.mod_date is None:
            del data["mod_date"]
        return data


@dataclass
class ProjectRoot:
    """An ancestor directory holding a project marker file."""
    path: str
    marker: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PersistedState:
    """The whole store aggregate, mirrored to state.json."""
    favorites: List[str] = field(default_factory=list)
    recents: List[RecentEntry] = field(default_factory=list)
    tags: List[TaggedPath] = field(default_factory=list)
    profiles: List[LaunchProfile] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "favorites": list(self.favorites),
            "recents": [entry.to_dict() for entry in self.recents],
            "tags": [tag.to_dict() for tag in self.tags],
            "profiles": [profile.to_dict() for profile in self.profiles],
        }

    def copy(self) -> "PersistedState":
        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, data: Any, source: Any = None) -> "PersistedState":
        """
        Builds the aggregate from a decoded state.json document.
        All four top-level keys are optional. Any structural problem raises
        MalformedStateError naming `source`.
        """
        if not isinstance(data, dict):
            raise MalformedStateError(source, "expected a JSON object at the top level")
        try:
            favorites = [str(path) for path in _list_of(data, "favorites", str)]
            recents = [
                RecentEntry(path=str(item["path"]), last_opened_utc=int(item["last_opened_utc"]))
                for item in _list_of(data, "recents", dict)
            ]
            tags = [TaggedPath(**_known_fields(TaggedPath, item)) for item in _list_of(data, "tags", dict)]
            profiles = [LaunchProfile(**_known_fields(LaunchProfile, item)) for item in _list_of(data, "profiles", dict)]
        except MalformedStateError:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MalformedStateError(source, str(e)) from e
        return cls(favorites=favorites, recents=recents, tags=tags, profiles=profiles)


def _list_of(data: Dict[str, Any], key: str, item_type: type) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"'{key}' must be a list")
    for item in value:
        if not isinstance(item, item_type):
            raise TypeError(f"'{key}' entries must be {item_type.__name__}, got {type(item).__name__}")
    return value
