from collections.abc import Mapping
from typing import TYPE_CHECKING

from .cell import GoogleCell
from .resources import Worksheet
from .row import GoogleRow

if TYPE_CHECKING:
    from .spreadsheet import GoogleSpreadsheet

class GoogleWorksheet():
    """
    Class representation of a worksheet, one of the tabs of the parent
    spreadsheet.  Requests are addressed with the spreadsheet key and the
    worksheet id, so this is mostly a convenience that fills in the id for
    the spreadsheet handle's row and cell operations.
    The dimensions are a snapshot from when the worksheets feed was read,
    call refresh() to pull them again.
    """
    def __init__(self, spreadsheet: "GoogleSpreadsheet",
                 worksheet: Worksheet|dict) -> None:
        self._spreadsheet = spreadsheet
        self._worksheet = worksheet if isinstance(worksheet, Worksheet) else Worksheet(**worksheet)

    def __bool__(self) -> bool:
        return bool(self._worksheet)

    def __str__(self) -> str:
        return str(self._worksheet)

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    def __len__(self) -> int:
        """
        In this context length is number of cells in the worksheet
        """
        return max(self.rows, 0) * max(self.cols, 0)

    @property
    def worksheet(self) -> Worksheet:
        return self._worksheet

    @property
    def id(self) -> str:
        return self._worksheet.id

    @property
    def title(self) -> str:
        return self._worksheet.title

    @property
    def rows(self) -> int:
        return self._worksheet.rowCount

    @property
    def cols(self) -> int:
        return self._worksheet.colCount

    @property
    def dimensions(self) -> tuple[int,int]:
        return (self.rows, self.cols)

    def refresh(self) -> None:
        """
        Re-read the worksheets feed and update title and dimensions.
        """
        info = self._spreadsheet.get_info()
        for w in info.worksheets:
            if w.id == self.id:
                self._worksheet.update_fields(**w.to_base())
                return
        raise KeyError(f"Worksheet {self.id} is no longer in the spreadsheet")

    def get_rows(self, start: int|None = None,
                 num: int|None = None,
                 orderby: str|None = None,
                 reverse: bool|None = None,
                 query: str|None = None) -> list[GoogleRow]:
        return self._spreadsheet.get_rows(self.id, start, num, orderby, reverse, query)

    def add_row(self, data: Mapping) -> GoogleRow:
        return self._spreadsheet.add_row(self.id, data)

    def get_cells(self, min_row: int|None = None,
                  max_row: int|None = None,
                  min_col: int|None = None,
                  max_col: int|None = None,
                  return_empty: bool|None = None) -> list[GoogleCell]:
        return self._spreadsheet.get_cells(self.id, min_row, max_row, min_col, max_col, return_empty)
