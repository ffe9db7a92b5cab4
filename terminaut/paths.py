"""Path normalization, flat directory listing and project-root detection."""

import os
from pathlib import Path
from typing import List, Union

from .config import PROJECT_MARKERS
from .exceptions import NotFoundError, ValidationError
from .models import DirectoryEntry, ProjectRoot


def normalize_path(raw: Union[str, Path]) -> str:
    """
    Canonical key for a user-supplied path.

    Expands `~` and resolves the path when it exists. A path that doesn't
    exist is returned expanded and absolute but otherwise untouched.
    """
    trimmed = str(raw).strip() if raw is not None else ""
    if not trimmed:
        raise ValidationError("Path cannot be empty.")
    expanded = Path(trimmed).expanduser()
    try:
        return str(expanded.resolve(strict=True))
    except (OSError, RuntimeError):
        return str(expanded.absolute())


def list_directory(path: Union[str, Path]) -> List[DirectoryEntry]:
    """Entries of one directory, sorted case-insensitively by name."""
    directory = Path(path)
    if not directory.is_dir():
        raise NotFoundError(f"Directory not found: {directory}")

    entries: List[DirectoryEntry] = []
    with os.scandir(directory) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            try:
                mod_date = int(entry.stat().st_mtime)
            except OSError:
                mod_date = None
            entries.append(DirectoryEntry(name=entry.name, path=entry.path, is_dir=is_dir, mod_date=mod_date))
    entries.sort(key=lambda e: e.name.lower())
    return entries


def detect_projects(path: Union[str, Path]) -> List[ProjectRoot]:
    """
    Project roots containing `path`, innermost first.
    Each ancestor contributes at most one root, for the first marker found.
    """
    start = Path(path)
    roots: List[ProjectRoot] = []
    for ancestor in (start, *start.parents):
        for marker in PROJECT_MARKERS:
            if (ancestor / marker).exists():
                roots.append(ProjectRoot(path=str(ancestor), marker=marker))
                break
    return roots
