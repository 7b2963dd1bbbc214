"""Abstract base class for tabular content stores.

Defines the two operations the content adapter and the booking pipeline
need: reading a whole table and appending one row to it.  Any backend
(Google Sheets, a CSV fixture, etc.) implements this ABC.
"""

from abc import ABC, abstractmethod


class SheetStore(ABC):
    """Abstract spreadsheet backend."""

    @abstractmethod
    async def get_rows(self, sheet_name: str) -> list[list[str]]:
        """Return every row of a table, header row first.

        Args:
            sheet_name: Name of the tab to read.

        Returns:
            List of rows; each row is a list of cell strings.  Trailing
            empty cells may be omitted by the backend.
        """

    @abstractmethod
    async def append_row(self, sheet_name: str, values: list) -> None:
        """Append one row of values after the last row of a table.

        Args:
            sheet_name: Name of the tab to write.
            values: Cell values in column order.
        """
