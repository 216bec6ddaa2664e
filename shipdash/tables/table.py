"""
Server-driven transaction table.

TransactionsTable turns a page of serialized rows into a render model (and
HTML) according to a TableConfig. Paging, sorting and column reordering are
delegated: the table works out the new value and hands it to the caller's
callback, which re-queries the API.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from django.template.loader import render_to_string

from .config import (
    TableConfig, apply_column_order, array_move, get_current_breakpoint,
    get_hidden_by_responsive, get_visible_columns,
)
from .renderers import PLACEHOLDER

logger = logging.getLogger(__name__)

PAGE_SIZE_OPTIONS = (25, 50, 100, 200)
SKELETON_ROWS = 10
EMPTY_MESSAGE = 'No data found.'
TEMPLATE_NAME = 'tables/transactions_table.html'


@dataclass(frozen=True)
class PrefixColumn:
    """Fixed-width column drawn before the configured ones."""

    width: float
    render: Callable[[Dict], Any]


def default_row_key(row):
    return row.get('id')


class TransactionsTable:
    """Render model and interaction handlers for one page of a transaction table."""

    def __init__(self, config: TableConfig, data: Sequence[Dict], cell_renderers: Dict[str, Callable],
                 *, get_row_key: Callable = default_row_key, total_count: int = 0,
                 page_index: int = 0, page_size: int = 50, on_page_change: Optional[Callable] = None,
                 page_size_options: Sequence[int] = PAGE_SIZE_OPTIONS, is_loading: bool = False,
                 is_page_loading: bool = False, user_column_visibility: Optional[Dict[str, bool]] = None,
                 empty_message: str = EMPTY_MESSAGE, item_name: str = 'items',
                 on_row_click: Optional[Callable] = None, prefix_column: Optional[PrefixColumn] = None,
                 sort_field: Optional[str] = None, sort_direction: str = 'desc',
                 on_sort_change: Optional[Callable] = None, column_order: Optional[Sequence[str]] = None,
                 on_column_order_change: Optional[Callable] = None, viewport_width: int = 1280):
        self.config = config
        self.data = list(data)
        self.cell_renderers = cell_renderers
        self.get_row_key = get_row_key
        self.total_count = total_count
        self.page_index = page_index
        self.page_size = page_size
        self.on_page_change = on_page_change
        self.page_size_options = tuple(page_size_options)
        self.is_loading = is_loading
        self.is_page_loading = is_page_loading
        self.user_column_visibility = user_column_visibility or {}
        self.empty_message = empty_message
        self.item_name = item_name
        self.on_row_click = on_row_click
        self.prefix_column = prefix_column
        self.sort_field = sort_field
        self.sort_direction = sort_direction
        self.on_sort_change = on_sort_change
        self.column_order = list(column_order) if column_order else None
        self.on_column_order_change = on_column_order_change
        self.breakpoint = get_current_breakpoint(viewport_width)

    # Columns

    @property
    def max_priority(self) -> int:
        return self.config.max_priority(self.breakpoint)

    @property
    def columns(self):
        """Visible columns in display order."""
        visible = get_visible_columns(self.config, self.max_priority, self.user_column_visibility)
        return apply_column_order(visible, self.column_order)

    @property
    def hidden_count(self) -> int:
        return len(get_hidden_by_responsive(self.config, self.max_priority, self.user_column_visibility))

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def is_reorderable(self) -> bool:
        return self.on_column_order_change is not None

    # Interactions

    def click_header(self, column_id: str):
        """
        Ask for a new sort. A new column starts descending; clicking the
        active column flips its direction.

        Returns the emitted (field, direction), or None when nothing is emitted.
        """
        column = self.config.get_column(column_id)
        if self.on_sort_change is None or column is None or not column.sortable:
            return None

        if self.sort_field == column_id:
            direction = 'desc' if self.sort_direction == 'asc' else 'asc'
        else:
            direction = 'desc'

        self.sort_field, self.sort_direction = column_id, direction
        self.on_sort_change(column_id, direction)
        return column_id, direction

    def change_page(self, page_index: int, page_size: Optional[int] = None):
        """Ask for another page; a page size change goes back to the first page."""
        page_size = page_size or self.page_size
        if page_size != self.page_size:
            page_index = 0
            self.page_size = page_size
        last_page = max(self.total_pages - 1, 0)
        page_index = min(max(page_index, 0), last_page)

        self.page_index = page_index
        if self.on_page_change is not None:
            self.on_page_change(page_index, page_size)
        return page_index, page_size

    def move_column(self, active_id: str, over_id: str):
        """Drag ``active_id`` onto ``over_id``; returns the new id order or None."""
        if not self.is_reorderable or active_id == over_id:
            return None
        current = [col.id for col in self.columns]
        if active_id not in current or over_id not in current:
            return None

        order = array_move(current, current.index(active_id), current.index(over_id))
        self.column_order = order
        self.on_column_order_change(order)
        return order

    def click_row(self, row_key):
        if self.on_row_click is None:
            return False
        for row in self.data:
            if self.get_row_key(row) == row_key:
                self.on_row_click(row)
                return True
        logger.debug(f"Row {row_key} is not on the current page of {self.config.name}")
        return False

    # Rendering

    def _col_widths(self, columns) -> Dict[str, str]:
        prefix_width = self.prefix_column.width if self.prefix_column else 0
        total = prefix_width + sum(0 if col.shrink_to_fit else col.width for col in columns)
        if not total:
            return {}
        widths = {
            col.id: '0px' if col.shrink_to_fit else f"{col.width / total * 100:.1f}%"
            for col in columns
        }
        if self.prefix_column:
            widths['_prefix'] = f"{prefix_width / total * 100:.1f}%"
        return widths

    def _cell(self, row, column):
        renderer = self.cell_renderers.get(column.id)
        return renderer(row, column) if renderer else PLACEHOLDER

    def build(self) -> Dict[str, Any]:
        """Plain render model consumed by the template."""
        columns = self.columns
        widths = self._col_widths(columns)
        header = [
            {
                'id': col.id,
                'header': col.header,
                'align': col.align,
                'width': widths.get(col.id),
                'tinted': col.tinted,
                'max_width': col.max_width,
                'sortable': bool(col.sortable and self.on_sort_change),
                'active_sort': self.sort_field == col.id,
                'sort_direction': self.sort_direction if self.sort_field == col.id else None,
            }
            for col in columns
        ]

        rows = []
        if not self.is_loading:
            for row in self.data:
                rows.append({
                    'key': self.get_row_key(row),
                    'prefix': self.prefix_column.render(row) if self.prefix_column else None,
                    'cells': [
                        {'id': col.id, 'html': self._cell(row, col), 'align': col.align, 'tinted': col.tinted}
                        for col in columns
                    ],
                })

        total_pages = self.total_pages
        return {
            'name': self.config.name,
            'columns': header,
            'has_prefix': self.prefix_column is not None,
            'prefix_width': widths.get('_prefix'),
            'rows': rows,
            'is_loading': self.is_loading,
            'skeleton_rows': range(SKELETON_ROWS) if self.is_loading else range(0),
            'is_dimmed': self.is_page_loading and not self.is_loading,
            'is_empty': not self.is_loading and not self.data,
            'empty_message': self.empty_message,
            'colspan': len(columns) + (1 if self.prefix_column else 0),
            'interactive': self.on_row_click is not None,
            'reorderable': self.is_reorderable,
            'footer': {
                'shown': len(self.data),
                'total_count': self.total_count,
                'item_name': self.item_name,
                'page_size': self.page_size,
                'page_size_options': self.page_size_options,
                'hidden_count': self.hidden_count,
                'page_label': f"Page {self.page_index + 1} of {total_pages or 1}",
                'has_previous': self.page_index > 0,
                'has_next': self.page_index < total_pages - 1,
            },
        }

    def render(self) -> str:
        return render_to_string(TEMPLATE_NAME, {'table': self.build()})
