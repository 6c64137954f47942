"""In-memory search, sort and pagination for tabular pages.

:class:`DataTable` holds the rows a page loaded plus the user's current
search term, sort column/direction and page number, and derives what should
be on screen from them. Nothing here talks to the network; row actions are
plain callbacks owned by the page.

Ordering rules for :meth:`DataTable.sort_by`:

* ``None`` values always go last, in either direction.
* Numbers (``bool`` excluded) sort before every other value and compare
  numerically among themselves.
* Everything else compares by its ``str()`` form.

Mixing ``10`` and ``"9"`` in one column therefore puts ``10`` first; pages
that want a different order should pass homogeneous values.
"""
import dataclasses
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel

ASCENDING = "asc"
DESCENDING = "desc"

DEFAULT_PAGE_SIZE = 10
DEFAULT_EMPTY_MESSAGE = "No data available"
MAX_PAGE_BUTTONS = 5

# Display order of the per-row action buttons.
ACTIONS = ("view", "edit", "delete")

Row = Any
Renderer = Callable[[Any, Row], Any]
RowCallback = Callable[[Row], Any]


@dataclass(frozen=True)
class TableColumn:
    key: str
    label: str
    sortable: bool = False
    render: Renderer | None = None


@dataclass(frozen=True)
class HeaderCell:
    key: str
    label: str
    sortable: bool
    sort_direction: str | None = None


@dataclass(frozen=True)
class RenderedRow:
    item: Row
    cells: list[Any]


@dataclass(frozen=True)
class TableView:
    headers: list[HeaderCell]
    rows: list[RenderedRow]
    actions: list[str]
    empty_message: str | None = None
    loading: bool = False
    current_page: int = 1
    total_pages: int = 0
    page_numbers: list[int] = field(default_factory=list)
    summary: str | None = None


def row_fields(row: Row) -> Mapping[str, Any]:
    """Field mapping for a dict, pydantic model, dataclass or plain object."""
    if isinstance(row, Mapping):
        return row
    if isinstance(row, BaseModel):
        return row.model_dump(by_alias=True)
    if dataclasses.is_dataclass(row) and not isinstance(row, type):
        return dataclasses.asdict(row)
    return vars(row)


def _search_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sort_key(value: Any) -> tuple:
    if _is_number(value):
        return (0, value, "")
    return (1, 0, str(value))


class DataTable:
    def __init__(
        self,
        rows: Sequence[Row],
        columns: Sequence[TableColumn],
        on_edit: RowCallback | None = None,
        on_delete: RowCallback | None = None,
        on_view: RowCallback | None = None,
        searchable: bool = True,
        pagination: bool = True,
        page_size: int = DEFAULT_PAGE_SIZE,
        loading: bool = False,
        empty_message: str = DEFAULT_EMPTY_MESSAGE,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")

        self.rows = list(rows)
        self.columns = list(columns)
        self.callbacks = {"view": on_view, "edit": on_edit, "delete": on_delete}
        self.searchable = searchable
        self.pagination = pagination
        self.page_size = page_size
        self.loading = loading
        self.empty_message = empty_message

        self.search = ""
        self.sort_key = ""
        self.sort_order = ASCENDING
        self.current_page = 1

    # State changes

    def set_rows(self, rows: Sequence[Row]) -> None:
        self.rows = list(rows)

    def set_search(self, term: str) -> None:
        self.search = term or ""
        self.current_page = 1

    def sort_by(self, key: str) -> None:
        column = self._column(key)
        if not column.sortable:
            raise ValueError(f"Column {key!r} is not sortable")

        if self.sort_key == key:
            self.sort_order = DESCENDING if self.sort_order == ASCENDING else ASCENDING
        else:
            self.sort_key = key
            self.sort_order = ASCENDING

    def set_page(self, page: int) -> None:
        self.current_page = page

    def next_page(self) -> None:
        self.current_page = min(self.current_page + 1, max(self.total_pages, 1))

    def previous_page(self) -> None:
        self.current_page = max(self.current_page - 1, 1)

    # Derived data

    @property
    def filtered_rows(self) -> list[Row]:
        if not self.searchable or not self.search:
            return list(self.rows)

        needle = self.search.lower()
        return [
            row for row in self.rows
            if any(needle in _search_text(value).lower() for value in row_fields(row).values())
        ]

    @property
    def sorted_rows(self) -> list[Row]:
        rows = self.filtered_rows
        if not self.sort_key:
            return rows

        present = []
        missing = []
        for row in rows:
            value = row_fields(row).get(self.sort_key)
            (missing if value is None else present).append((value, row))

        present.sort(key=lambda pair: _sort_key(pair[0]), reverse=self.sort_order == DESCENDING)
        return [row for _, row in present] + [row for _, row in missing]

    @property
    def page_rows(self) -> list[Row]:
        rows = self.sorted_rows
        if not self.pagination:
            return rows
        if self.current_page < 1:
            return []

        start = (self.current_page - 1) * self.page_size
        return rows[start:start + self.page_size]

    @property
    def total_rows(self) -> int:
        return len(self.filtered_rows)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_rows / self.page_size)

    @property
    def show_pagination(self) -> bool:
        return self.pagination and self.total_pages > 1

    @property
    def actions(self) -> list[str]:
        return [action for action in ACTIONS if self.callbacks[action] is not None]

    def page_numbers(self) -> list[int]:
        """Up to five page buttons, centred on the current page where possible."""
        total_pages = self.total_pages
        count = min(MAX_PAGE_BUTTONS, total_pages)
        if total_pages <= MAX_PAGE_BUTTONS or self.current_page <= 3:
            first = 1
        elif self.current_page >= total_pages - 2:
            first = total_pages - MAX_PAGE_BUTTONS + 1
        else:
            first = self.current_page - 2
        return list(range(first, first + count))

    def summary(self) -> str:
        total = self.total_rows
        start = (self.current_page - 1) * self.page_size + 1
        end = min(self.current_page * self.page_size, total)
        if self.current_page < 1 or start > end:
            start = end = 0
        return f"Showing {start} to {end} of {total} results"

    def sort_direction(self, key: str) -> str | None:
        return self.sort_order if self.sort_key == key else None

    # Rendering

    def render_cell(self, column: TableColumn, row: Row) -> Any:
        value = row_fields(row).get(column.key)
        if column.render is not None:
            return column.render(value, row)
        return value

    def render(self) -> TableView:
        headers = [
            HeaderCell(
                key=column.key,
                label=column.label,
                sortable=column.sortable,
                sort_direction=self.sort_direction(column.key) if column.sortable else None,
            )
            for column in self.columns
        ]

        if self.loading:
            return TableView(headers=headers, rows=[], actions=self.actions, loading=True)

        page = self.page_rows
        return TableView(
            headers=headers,
            rows=[
                RenderedRow(item=row, cells=[self.render_cell(column, row) for column in self.columns])
                for row in page
            ],
            actions=self.actions,
            empty_message=self.empty_message if not page else None,
            current_page=self.current_page,
            total_pages=self.total_pages,
            page_numbers=self.page_numbers() if self.show_pagination else [],
            summary=self.summary() if self.show_pagination else None,
        )

    def trigger(self, action: str, row: Row) -> Any:
        callback = self.callbacks.get(action)
        if callback is None:
            raise ValueError(f"No {action!r} action on this table")
        return callback(row)

    def _column(self, key: str) -> TableColumn:
        for column in self.columns:
            if column.key == key:
                return column
        raise ValueError(f"Unknown column {key!r}")
