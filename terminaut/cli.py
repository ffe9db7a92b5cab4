import argparse
import json
from typing import Any

from . import api
from .config import DEFAULT_SEARCH_LIMIT, DEFAULT_TAG_COLOR

# --- Output helpers ---

def _to_jsonable(value: Any) -> Any:
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


def emit_json(value: Any) -> None:
    """Prints one compact JSON document on stdout."""
    print(json.dumps(_to_jsonable(value)))


def emit_ok() -> None:
    emit_json({"status": "ok"})


# --- Command Functions ---

def normalize_cli(args: argparse.Namespace):
    """Handles the 'normalize' CLI command."""
    print(api.normalize_path(args.path))


def list_directory_cli(args: argparse.Namespace):
    """Handles the 'list' CLI command."""
    emit_json(api.list_directory(args.path))


def projects_cli(args: argparse.Namespace):
    """Handles the 'projects' CLI command."""
    emit_json(api.detect_projects(args.path))


def version_cli(args: argparse.Namespace):
    print(api.version())


def favorites_list_cli(args: argparse.Namespace):
    emit_json(api.list_favorites())


def favorites_add_cli(args: argparse.Namespace):
    api.add_favorite(args.path)
    emit_ok()


def favorites_remove_cli(args: argparse.Namespace):
    api.remove_favorite(args.path)
    emit_ok()


def recents_list_cli(args: argparse.Namespace):
    emit_json(api.list_recents())


def recents_touch_cli(args: argparse.Namespace):
    api.touch_recent(args.path)
    emit_ok()


def tags_list_cli(args: argparse.Namespace):
    emit_json(api.list_tags())


def tags_for_cli(args: argparse.Namespace):
    emit_json(api.tags_for(args.path))


def tags_add_cli(args: argparse.Namespace):
    api.set_tag(args.path, args.tag, args.color)
    emit_ok()


def tags_remove_cli(args: argparse.Namespace):
    api.remove_tag(args.path, args.tag)
    emit_ok()


def profiles_list_cli(args: argparse.Namespace):
    emit_json(api.list_profiles())


def profiles_save_cli(args: argparse.Namespace):
    """Handles 'profiles save': prints the stored profile, including its id."""
    profile = api.save_profile(
        name=args.name,
        id=args.id,
        command=args.command_line,
        working_dir=args.working_dir,
        terminal=args.terminal,
        windows=args.windows,
    )
    emit_json(profile)


def profiles_delete_cli(args: argparse.Namespace):
    api.delete_profile(args.id)
    emit_ok()


def search_cli(args: argparse.Namespace):
    """Handles the 'search' CLI command."""
    emit_json(api.search(args.start, args.query, limit=args.limit))


# --- Argument Parser Setup ---

def _add_group(subparsers, name: str, help_text: str):
    """Adds a command that itself takes a required action sub-command."""
    group = subparsers.add_parser(name, help=help_text)
    actions = group.add_subparsers(dest='action', metavar='ACTION')
    actions.required = True
    return actions


def setup_cli_parsers(parser: argparse.ArgumentParser):
    """Configures subparsers for CLI commands."""
    subparsers = parser.add_subparsers(dest='command', help='Sub-command help')
    subparsers.required = False # Make subcommands optional (so running without args launches TUI)

    parser_normalize = subparsers.add_parser('normalize', help='Print the normalized form of a path')
    parser_normalize.add_argument('path')
    parser_normalize.set_defaults(func=normalize_cli)

    parser_list = subparsers.add_parser('list', help='List the entries of a directory')
    parser_list.add_argument('path')
    parser_list.set_defaults(func=list_directory_cli)

    parser_projects = subparsers.add_parser('projects', help='Detect project roots containing a path')
    parser_projects.add_argument('path')
    parser_projects.set_defaults(func=projects_cli)

    # Favorites
    favorites = _add_group(subparsers, 'favorites', 'Manage favorite directories')
    favorites.add_parser('list', help='List favorites').set_defaults(func=favorites_list_cli)
    fav_add = favorites.add_parser('add', help='Add a favorite')
    fav_add.add_argument('path')
    fav_add.set_defaults(func=favorites_add_cli)
    fav_remove = favorites.add_parser('remove', help='Remove a favorite')
    fav_remove.add_argument('path')
    fav_remove.set_defaults(func=favorites_remove_cli)

    # Recents
    recents = _add_group(subparsers, 'recents', 'Recently opened directories')
    recents.add_parser('list', help='List recent directories, newest first').set_defaults(func=recents_list_cli)
    rec_touch = recents.add_parser('touch', help='Mark a directory as just opened')
    rec_touch.add_argument('path')
    rec_touch.set_defaults(func=recents_touch_cli)

    # Tags
    tags = _add_group(subparsers, 'tags', 'Manage colored tags on directories')
    tags.add_parser('list', help='List all tags').set_defaults(func=tags_list_cli)
    tag_for = tags.add_parser('for', help='List the tags of one directory')
    tag_for.add_argument('path')
    tag_for.set_defaults(func=tags_for_cli)
    tag_add = tags.add_parser('add', help='Add a tag, or change its color')
    tag_add.add_argument('path')
    tag_add.add_argument('tag')
    tag_add.add_argument('--color', default=DEFAULT_TAG_COLOR, help=f'Tag color (default: {DEFAULT_TAG_COLOR})')
    tag_add.set_defaults(func=tags_add_cli)
    tag_remove = tags.add_parser('remove', help='Remove a tag from a directory')
    tag_remove.add_argument('path')
    tag_remove.add_argument('tag')
    tag_remove.set_defaults(func=tags_remove_cli)

    # Profiles
    profiles = _add_group(subparsers, 'profiles', 'Manage launch profiles')
    profiles.add_parser('list', help='List profiles by name').set_defaults(func=profiles_list_cli)
    prof_save = profiles.add_parser('save', help='Create a profile, or replace one by --id')
    prof_save.add_argument('name', help='Name of the profile')
    prof_save.add_argument('--id', help='Id of the profile to replace')
    prof_save.add_argument('--command', dest='command_line', help='Command to run in each window')
    prof_save.add_argument('--working-dir', help='Directory to open the windows in')
    prof_save.add_argument('--terminal', help='Terminal application to use')
    prof_save.add_argument('-w', '--windows', type=int, help='Number of windows (1-10, default: 1)')
    prof_save.set_defaults(func=profiles_save_cli)
    prof_delete = profiles.add_parser('delete', help='Delete a profile by id')
    prof_delete.add_argument('id')
    prof_delete.set_defaults(func=profiles_delete_cli)

    # Search
    parser_search = subparsers.add_parser('search', help='Fuzzy-search directories by name')
    parser_search.add_argument('query')
    parser_search.add_argument('--start', default='~', help='Directory to search from (default: home)')
    parser_search.add_argument('-l', '--limit', type=int, default=DEFAULT_SEARCH_LIMIT,
                               help=f'Maximum number of results (default: {DEFAULT_SEARCH_LIMIT})')
    parser_search.set_defaults(func=search_cli)

    parser_version = subparsers.add_parser('version', help='Print the version')
    parser_version.set_defaults(func=version_cli)
