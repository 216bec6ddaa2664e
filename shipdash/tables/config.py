"""
Declarative column configuration for the transaction tables.

A TableConfig lists its columns in display order; a column's priority only
decides which columns hide first on narrower screens.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

BREAKPOINT_WIDTHS = (
    ('xl', 1280),
    ('lg', 1024),
    ('md', 768),
    ('sm', 640),
)

SORT_DIRECTIONS = ('asc', 'desc')


@dataclass(frozen=True)
class ColumnConfig:
    id: str
    header: str
    width: float
    priority: int
    default_visible: bool = True
    align: str = 'left'
    sortable: bool = False
    sort_key: Optional[str] = None
    max_width: Optional[int] = None
    shrink_to_fit: bool = False
    tinted: bool = False

    @property
    def order_field(self) -> str:
        """Model field the column sorts on."""
        return self.sort_key or self.id


@dataclass(frozen=True)
class TableConfig:
    name: str
    columns: Tuple[ColumnConfig, ...]
    breakpoints: Dict[str, int] = field(default_factory=dict)
    default_sort: str = 'created_at'

    @property
    def column_ids(self) -> List[str]:
        return [col.id for col in self.columns]

    def get_column(self, column_id: str) -> Optional[ColumnConfig]:
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def max_priority(self, breakpoint: str) -> int:
        return self.breakpoints[breakpoint]

    def sortable_fields(self) -> Dict[str, str]:
        """Column ids and sort keys accepted for ordering, mapped to model fields."""
        fields = {}
        for col in self.columns:
            if col.sortable:
                fields[col.id] = col.order_field
                fields[col.order_field] = col.order_field
        return fields


def get_current_breakpoint(width: int) -> str:
    for name, min_width in BREAKPOINT_WIDTHS:
        if width >= min_width:
            return name
    return 'xs'


def is_column_enabled(column: ColumnConfig, user_visibility: Optional[Dict[str, bool]] = None) -> bool:
    """Whether the user (or the column default) has the column switched on."""
    if user_visibility and column.id in user_visibility:
        return bool(user_visibility[column.id])
    return column.default_visible


def get_visible_columns(config: TableConfig, max_priority: int,
                        user_visibility: Optional[Dict[str, bool]] = None) -> List[ColumnConfig]:
    return [
        col for col in config.columns
        if is_column_enabled(col, user_visibility) and col.priority <= max_priority
    ]


def get_hidden_by_responsive(config: TableConfig, max_priority: int,
                             user_visibility: Optional[Dict[str, bool]] = None) -> List[ColumnConfig]:
    """Switched-on columns that the screen width pushes out."""
    return [
        col for col in config.columns
        if is_column_enabled(col, user_visibility) and col.priority > max_priority
    ]


def get_redistributed_widths(columns: Sequence[ColumnConfig]) -> Dict[str, float]:
    """Scale base widths so the visible columns add up to 100 percent."""
    total = sum(col.width for col in columns)
    if not total:
        return {col.id: 0.0 for col in columns}
    return {col.id: col.width / total * 100 for col in columns}


def create_width_map(config: TableConfig, visible_ids: Iterable[str]) -> Dict[str, str]:
    visible_ids = set(visible_ids)
    visible = [col for col in config.columns if col.id in visible_ids]
    return {
        column_id: f"{width:.2f}%"
        for column_id, width in get_redistributed_widths(visible).items()
    }


def apply_column_order(visible: Sequence[ColumnConfig], order: Optional[Sequence[str]]) -> List[ColumnConfig]:
    """Put columns from a saved order first; the rest keep config order."""
    if not order:
        return list(visible)
    by_id = {col.id: col for col in visible}
    ordered = [by_id[column_id] for column_id in order if column_id in by_id]
    seen = {col.id for col in ordered}
    ordered.extend(col for col in visible if col.id not in seen)
    return ordered


def array_move(items: Sequence[str], old_index: int, new_index: int) -> List[str]:
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


def resolve_ordering(config: TableConfig, sort_field: Optional[str],
                     sort_direction: Optional[str] = 'desc') -> List[str]:
    """
    ORM ordering for a requested sort.

    Unknown fields fall back to the table's default sort. The primary key is
    always appended so that offset pagination stays stable.
    """
    direction = (sort_direction or 'desc').lower()
    if direction not in SORT_DIRECTIONS:
        direction = 'desc'

    model_field = config.sortable_fields().get(sort_field or '', config.default_sort)
    prefix = '-' if direction == 'desc' else ''
    ordering = [f"{prefix}{model_field}"]
    if model_field != 'id':
        ordering.append(f"{prefix}id")
    return ordering


class ColumnSelector:
    """Per-user column visibility choices layered over the column defaults."""

    def __init__(self, config: TableConfig, visibility: Optional[Dict[str, bool]] = None):
        self.config = config
        self.visibility = dict(visibility or {})

    def is_visible(self, column_id: str) -> bool:
        column = self.config.get_column(column_id)
        if column is None:
            return False
        return is_column_enabled(column, self.visibility)

    def toggle(self, column_id: str) -> bool:
        self.visibility[column_id] = not self.is_visible(column_id)
        return self.visibility[column_id]

    def reset(self):
        self.visibility = {}
