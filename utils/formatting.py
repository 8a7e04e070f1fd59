"""Console formatting for collection pages.

Provides reusable functions for:
- Truncating long cell values
- Rendering a page of records as an aligned table
- Summarizing pagination state ("Page 2 of 4, 37 records")
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to maximum length with ellipsis.

    Examples:
        truncate_text("Long text here", 10) -> "Long te..."
        truncate_text("Short", 10) -> "Short"
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def format_cell(value: Any) -> str:
    """Render one record value for a table cell."""
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def format_page_summary(page: int, page_count: int, total: int) -> str:
    """Examples:
        format_page_summary(2, 4, 37) -> "Page 2 of 4, 37 records"
        format_page_summary(1, 1, 1) -> "Page 1 of 1, 1 record"
    """
    noun = "record" if total == 1 else "records"
    return f"Page {page} of {page_count}, {total:,d} {noun}"


class TableFormatter:
    """Formats records as aligned tabular output."""

    def __init__(self, columns: List[str], max_width: int = 40):
        """Initialize table formatter.

        Args:
            columns: Record keys to show, in order; also used as headers
            max_width: Cells longer than this are truncated
        """
        self.columns = columns
        self.max_width = max_width
        self.column_widths = [len(col) for col in columns]
        self.rows: List[List[str]] = []

    def add_row(self, values: Sequence[Any]) -> None:
        """Add a row of values in column order.

        Raises:
            ValueError: If value count doesn't match column count
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}")

        str_values = []
        for i, val in enumerate(values):
            str_val = truncate_text(format_cell(val), self.max_width)
            str_values.append(str_val)
            if len(str_val) > self.column_widths[i]:
                self.column_widths[i] = len(str_val)

        self.rows.append(str_values)

    def add_records(self, records: Sequence[Mapping[str, Any]]) -> None:
        """Add one row per record, picking ``self.columns`` from each."""
        for record in records:
            self.add_row([record.get(col) for col in self.columns])

    def _format_row(self, values: List[str], is_header: bool = False) -> str:
        cells = []
        for i, val in enumerate(values):
            width = self.column_widths[i]
            if is_header:
                cells.append(val.ljust(width))
            else:
                # Right-align numbers
                try:
                    float(val)
                    cells.append(val.rjust(width))
                except ValueError:
                    cells.append(val.ljust(width))

        return "  ".join(cells).rstrip()

    def to_string(self, show_header: bool = True, empty_message: Optional[str] = "No records") -> str:
        """Format table as multi-line string."""
        lines = []

        if show_header:
            lines.append(self._format_row(self.columns, is_header=True))
            lines.append("  ".join("-" * w for w in self.column_widths))

        if not self.rows and empty_message:
            lines.append(empty_message)

        for row in self.rows:
            lines.append(self._format_row(row))

        return "\n".join(lines)


# Columns shown by ``main.py browse`` per resource.
DEFAULT_COLUMNS: Dict[str, List[str]] = {
    "complaints": ["id", "prisoner_name", "complaint_date", "complaint_status", "station_name"],
    "staff-deployments": ["id", "full_name", "force_number", "rank", "station_name", "start_date", "is_active"],
    "journals": ["id", "journal_date", "type_of_journal_name", "duty_officer_username", "activity"],
}
