"""Bounded fuzzy search for directories under a root."""

import logging
import os
import typing
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import pathspec
from rapidfuzz import fuzz, utils

from .config import (
    DEFAULT_SEARCH_LIMIT,
    SEARCH_CANDIDATE_FACTOR,
    SEARCH_GIT_IGNORE_FILES,
    SEARCH_IGNORE_FILES,
    SEARCH_MAX_DEPTH,
)
from .exceptions import ValidationError
from .models import SearchResult

logger = logging.getLogger(__name__)

# (directory the rules are relative to, compiled rules)
IgnoreRules = Tuple[Path, pathspec.PathSpec]


def is_subsequence(query: str, name: str) -> bool:
    """
    True if every character of `query` appears in `name` in order.
    Smart case: the comparison ignores case unless the query has an uppercase letter.
    """
    if not any(ch.isupper() for ch in query):
        name = name.lower()
    position = 0
    for ch in query:
        position = name.find(ch, position)
        if position < 0:
            return False
        position += 1
    return True


def fuzzy_score(query: str, name: str) -> Optional[float]:
    """
    Match quality of `name` for `query`, higher is better.
    Returns None (not zero) when the query is not a subsequence of the name.
    """
    if not name or not is_subsequence(query, name):
        return None
    return fuzz.WRatio(query, name, processor=utils.default_process)


# --- Ignore files ---

def _read_ignore_rules(directory: Path, filenames: Sequence[str] = SEARCH_IGNORE_FILES) -> Optional[IgnoreRules]:
    lines: List[str] = []
    for filename in filenames:
        try:
            lines.extend((directory / filename).read_text(encoding='utf-8', errors='replace').splitlines())
        except OSError:
            continue
    if not lines:
        return None
    return (directory, pathspec.GitIgnoreSpec.from_lines(lines))


def _directory_rules(directory: Path, in_repo: bool) -> Optional[IgnoreRules]:
    """.ignore always applies; .gitignore only counts inside a git work tree."""
    filenames = SEARCH_IGNORE_FILES + SEARCH_GIT_IGNORE_FILES if in_repo else SEARCH_IGNORE_FILES
    return _read_ignore_rules(directory, filenames)


def _git_exclude_rules(repo_root: Path) -> Optional[IgnoreRules]:
    return _read_ignore_rules(repo_root, filenames=(os.path.join(".git", "info", "exclude"),))


def _git_work_tree(path: Path) -> Optional[Path]:
    """The nearest directory at or above `path` that holds a .git entry."""
    for directory in (path, *path.parents):
        if (directory / ".git").exists():
            return directory
    return None


def _ancestor_rules(root: Path) -> Tuple[List[IgnoreRules], bool]:
    """
    Ignore rules inherited from the root's ancestors, outermost first, and
    whether the root lies inside a git work tree.

    .ignore files of every ancestor apply. .gitignore files apply only for
    ancestors inside the enclosing work tree, together with its
    .git/info/exclude.
    """
    repo_root = _git_work_tree(root)
    collected: List[IgnoreRules] = []
    if repo_root is not None:
        exclude = _git_exclude_rules(repo_root)
        if exclude:
            collected.append(exclude)
    # The root's own ignore files are read by the walk itself
    for directory in root.parents:
        in_repo = repo_root is not None and (directory == repo_root or repo_root in directory.parents)
        rules = _directory_rules(directory, in_repo)
        if rules:
            collected.append(rules)
    return list(reversed(collected)), repo_root is not None


def _is_ignored(path: Path, rules: Sequence[IgnoreRules]) -> bool:
    for base, spec in rules:
        try:
            relative = path.relative_to(base).as_posix()
        except ValueError:
            continue
        # Trailing slash so directory-only patterns ("build/") apply
        if spec.match_file(relative + "/"):
            return True
    return False


# --- Walking ---

def walk_directories(root: Path, max_depth: int = SEARCH_MAX_DEPTH) -> Iterator[Tuple[Path, int]]:
    """
    Yields (directory, depth) depth-first, starting with the root at depth 0.

    Hidden entries and directories excluded by ignore files are skipped and
    not descended into. .ignore files apply anywhere; .gitignore files and
    .git/info/exclude only inside a git work tree. Symlinks are not
    followed; directories that can't be read are skipped silently.
    Siblings come in name order.
    """
    root = Path(root)
    if not root.is_dir():
        logger.debug("Search root is not a directory: %s", root)
        return

    inherited, in_repo = _ancestor_rules(root)
    # Each frame: (directory, depth, rules from its ancestors, inside a work tree)
    stack: List[Tuple[Path, int, List[IgnoreRules], bool]] = [(root, 0, inherited, in_repo)]
    while stack:
        directory, depth, rules, in_repo = stack.pop()
        yield directory, depth
        if depth >= max_depth:
            continue

        if depth > 0 and (directory / ".git").exists():
            # Nested repository
            in_repo = True
            exclude = _git_exclude_rules(directory)
            if exclude:
                rules = rules + [exclude]
        own = _directory_rules(directory, in_repo)
        if own:
            rules = rules + [own]
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            continue

        children = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            child = Path(entry.path)
            if not _is_ignored(child, rules):
                children.append((child, depth + 1, rules, in_repo))
        # Reversed so the first child by name is popped next
        stack.extend(reversed(children))


# --- Search ---

def search_directories(
    root: typing.Union[str, Path],
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
    max_depth: int = SEARCH_MAX_DEPTH,
    candidate_factor: int = SEARCH_CANDIDATE_FACTOR,
    score_cutoff: float = 0,
) -> List[SearchResult]:
    """
    Finds directories under `root` whose names fuzzy-match `query`.

    Args:
        root: The normalized directory to start from.
        query: The search string; blank queries raise ValidationError.
        limit: Maximum number of results (values below 1 count as 1).
        max_depth: How many levels below the root to descend.
        candidate_factor: The walk stops once limit * candidate_factor
            matching directories have been collected, so very large trees
            cost a bounded amount of work at the price of possibly missing
            better matches further on.
        score_cutoff: Minimum score (0-100) for a match to be kept.

    Returns:
        Up to `limit` SearchResults ordered by score (highest first), ties
        broken by name. An empty list when nothing matches.
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query cannot be empty.")
    limit = max(1, int(limit))
    max_candidates = limit * max(1, int(candidate_factor))

    results: List[SearchResult] = []
    for directory, _depth in walk_directories(Path(root), max_depth=max_depth):
        if len(results) >= max_candidates:
            break
        name = directory.name
        score = fuzzy_score(query, name)
        if score is None or score < score_cutoff:
            continue
        results.append(SearchResult(path=str(directory), name=name, score=score))

    results.sort(key=lambda r: (-r.score, r.name))
    logger.debug("Search for %r under %s: %d candidates", query, root, len(results))
    return results[:limit]
