from pathlib import Path
from typing import List, Optional, Tuple

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, VerticalScroll
from textual.widgets import DataTable, Footer, Header, Input, Static
from textual.widgets.data_table import CellDoesNotExist
from textual.worker import get_current_worker

from .exceptions import TerminautError
from .paths import detect_projects
from .search import search_directories
from .storage import StateStore

SEARCH_RESULTS_LIMIT = 50

# (marker, name, path) for one table row
Row = Tuple[str, str, str]


class PickerApp(App[Optional[str]]):
    """Pick a directory from favorites, recents or a fuzzy search under the start directory."""

    TITLE = "Terminaut"
    SUB_TITLE = "Jump to a directory"

    DEFAULT_CSS = """
    Screen { layout: vertical; }
    Header { dock: top; height: auto; }
    Footer { dock: bottom; height: auto; }
    Input#filter-input { dock: top; width: 100%; }
    Horizontal#main-pane > Container#table-container {
        width: 3fr;
        border-right: thick $accent;
        padding-right: 1;
        height: 100%;
    }
    Horizontal#main-pane > VerticalScroll#preview-container {
        width: 2fr;
        padding-left: 2;
        height: 100%;
    }
    Static#preview-pane { padding: 1 2; }
    DataTable { width: 100%; height: 100%; }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=True, priority=True),
        Binding("escape", "quit", "Quit", show=True),
        Binding("enter", "select_dir", "Open", show=False),
        Binding("ctrl+f", "toggle_favorite", "Favorite", show=True, priority=True),
        Binding("up", "cursor_up", "Cursor Up", show=False, priority=True),
        Binding("down", "cursor_down", "Cursor Down", show=False, priority=True),
    ]

    def __init__(self, store: StateStore, start_dir: str):
        super().__init__()
        self.store = store
        self.start_dir = start_dir
        self._current_filter_query = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(id="filter-input", placeholder="Type to search directories...")
        with Horizontal(id="main-pane"):
            with Container(id="table-container"):
                yield DataTable(id="dir-table", cursor_type="row", zebra_stripes=True)
            with VerticalScroll(id="preview-container"):
                yield Static(id="preview-pane", expand=True, markup=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_column("", key="marker")
        table.add_column("Name", key="name")
        table.add_column("Path", key="path")
        self._refresh()
        self.query_one("#filter-input", Input).focus()

    # --- Event Handlers ---
    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter-input":
            self._current_filter_query = event.value
            self._refresh()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "filter-input":
            self.action_select_dir()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        path = str(event.row_key.value) if event.row_key is not None else None
        self._update_preview_pane(path)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.action_select_dir()

    # --- Actions ---
    def action_select_dir(self) -> None:
        path = self._path_at_cursor()
        if path is None:
            return
        self.store.touch_recent(path)
        self.exit(result=path)

    def action_toggle_favorite(self) -> None:
        path = self._path_at_cursor()
        if path is None:
            return
        if self.store.is_favorite(path):
            self.store.remove_favorite(path)
        else:
            self.store.add_favorite(path)
        self._refresh()

    def action_cursor_up(self) -> None:
        table = self.query_one(DataTable)
        if table.row_count > 0:
            table.move_cursor(row=max(0, table.cursor_row - 1))

    def action_cursor_down(self) -> None:
        table = self.query_one(DataTable)
        if table.row_count > 0:
            table.move_cursor(row=min(table.row_count - 1, table.cursor_row + 1))

    # --- Helper Methods ---
    def rows(self) -> List[Row]:
        """Favorites then recents, shown while the filter is empty."""
        favorites = set(self.store.list_favorites())
        rows = [("★", Path(p).name or p, p) for p in sorted(favorites)]
        rows.extend(
            ("", Path(e.path).name or e.path, e.path)
            for e in self.store.list_recents()
            if e.path not in favorites
        )
        return rows

    def search_rows(self, query: str) -> List[Row]:
        """Search results under the start directory, favorites marked."""
        favorites = set(self.store.list_favorites())
        try:
            results = search_directories(self.start_dir, query, limit=SEARCH_RESULTS_LIMIT)
        except TerminautError as e:
            self.log.error(f"Search failed: {e}")
            return []
        return [("★" if r.path in favorites else "", r.name, r.path) for r in results]

    def _refresh(self) -> None:
        query = self._current_filter_query.strip()
        if query:
            self.search_in_background(query)
        else:
            self.workers.cancel_group(self, "search")
            self._update_table(self.rows())

    @work(exclusive=True, thread=True, group="search")
    def search_in_background(self, query: str) -> None:
        """Walks the tree off the UI thread; a newer keystroke cancels this one."""
        rows = self.search_rows(query)
        if not get_current_worker().is_cancelled:
            self.call_from_thread(self._apply_search_rows, query, rows)

    def _apply_search_rows(self, query: str, rows: List[Row]) -> None:
        # Drop results for a filter the user has already changed
        if query == self._current_filter_query.strip():
            self._update_table(rows)

    def _path_at_cursor(self) -> Optional[str]:
        table = self.query_one(DataTable)
        if not table.is_valid_row_index(table.cursor_row):
            return None
        try:
            row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        except CellDoesNotExist:
            return None
        return str(row_key.value) if row_key is not None else None

    def _update_table(self, rows: List[Row]) -> None:
        table = self.query_one(DataTable)
        previous = self._path_at_cursor()
        table.clear()
        keys = []
        for marker, name, path in rows:
            if path in keys:
                continue
            table.add_row(marker, name, path, key=path)
            keys.append(path)
        if keys:
            table.move_cursor(row=keys.index(previous) if previous in keys else 0)
        self._update_preview_pane(self._path_at_cursor())

    def _update_preview_pane(self, path: Optional[str]) -> None:
        preview_pane = self.query_one("#preview-pane", Static)
        if path is None:
            preview_pane.update("[dim]Nothing selected...[/dim]")
            return
        lines = [f"[b]{escape(path)}[/b]", ""]
        tags = self.store.tags_for(path)
        if tags:
            lines.append("[b]Tags:[/b] " + "  ".join(f"[{t.color}]{escape(t.tag)}[/]" for t in tags))
        projects = detect_projects(path)
        if projects:
            lines.append("[b]Projects:[/b]")
            lines.extend(f"  {escape(p.path)} [dim]({p.marker})[/dim]" for p in projects)
        preview_pane.update("\n".join(lines))
