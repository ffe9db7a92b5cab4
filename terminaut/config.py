import os
from pathlib import Path

from platformdirs import user_data_path

# Application Name (also the on-disk namespace)
APP_NAME = "Terminaut"

# Determine the per-user data directory, allowing an explicit override
TERMINAUT_DATA_DIR = os.environ.get('TERMINAUT_DATA_DIR')
if TERMINAUT_DATA_DIR:
    DATA_DIR = Path(TERMINAUT_DATA_DIR).expanduser()
else:
    # Fallback to the platform data dir, e.g. ~/.local/share/Terminaut
    DATA_DIR = user_data_path(APP_NAME, appauthor=False)

# Define the path to the state JSON file
STATE_FILE = DATA_DIR / "state.json"

# Store limits and defaults
RECENTS_MAX_SIZE = 100 # Max number of recent directories to keep
DEFAULT_TAG_COLOR = "#0a84ff"
DEFAULT_PROFILE_NAME = "Quick Launch"
PROFILE_WINDOWS_MIN = 1
PROFILE_WINDOWS_MAX = 10

# Directory search
SEARCH_MAX_DEPTH = 5
SEARCH_CANDIDATE_FACTOR = 2 # Stop walking after limit * factor scored candidates
DEFAULT_SEARCH_LIMIT = 20
SEARCH_IGNORE_FILES = (".ignore",) # Honoured everywhere
SEARCH_GIT_IGNORE_FILES = (".gitignore",) # Only inside a git work tree

# Files or directories that mark the root of a project
PROJECT_MARKERS = (".git", "package.json", "Cargo.toml", "go.mod", "bunfig.toml")

# Logging
LOG_LEVEL_ENV = "TERMINAUT_LOG_LEVEL"
