import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

from .atom import ATOM_NS, GS_NS, links, qname, text, xml_safe_value
from .feed import FeedResponse
from ..exceptions import MissingConfigurationError

if TYPE_CHECKING:
    from .spreadsheet import GoogleSpreadsheet

_CELL_ENTRY_TEMPLATE = """<entry xmlns='{atom}' xmlns:gs='{gs}'>
  <id>{id}</id>
  <link rel="edit" type="application/atom+xml" href="{href}"/>
  <gs:cell row="{row}" col="{col}" inputValue="{value}"/>
</entry>
"""

class GoogleCell():
    """
    One cells feed entry.  Row and column are 1-based.
    value is the raw string shown in the sheet and numeric_value is
    only present when the service reports the cell as a number.
    """
    def __init__(self, spreadsheet: "GoogleSpreadsheet", worksheet_id: str,
                 entry: ET.Element) -> None:
        self._spreadsheet = spreadsheet
        self._worksheet_id = worksheet_id
        self._parse(entry)

    def _parse(self, entry: ET.Element) -> None:
        cell = entry.find(qname('gs', 'cell'))
        if cell is None:
            raise ValueError("Cells feed entry without a gs:cell element")
        self.id = text(entry, 'atom', 'id')
        self.row = int(cell.get('row'))
        self.col = int(cell.get('col'))
        self.value = cell.text or ""
        numeric = cell.get('numericValue')
        self.numeric_value = float(numeric) if numeric is not None else None
        self.links = links(entry)

    def __str__(self) -> str:
        return f"R{self.row}C{self.col}:{self.value!r}"

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    @property
    def worksheet_id(self) -> str:
        return self._worksheet_id

    def edit_xml(self) -> str:
        href = self._edit_link()
        return _CELL_ENTRY_TEMPLATE.format(atom=ATOM_NS, gs=GS_NS,
                                           id=xml_safe_value(self.id or href),
                                           href=xml_safe_value(href),
                                           row=self.row, col=self.col,
                                           value=xml_safe_value(self.value))

    def _edit_link(self) -> str:
        link = self.links.get('edit')
        if not link:
            raise MissingConfigurationError("Cell has no edit link, use an authenticated 'full' projection")
        return link

    def set_value(self, value) -> FeedResponse|bool:
        self.value = value
        return self.save()

    def save(self) -> FeedResponse|bool:
        response = self._spreadsheet.make_feed_request(self._edit_link(), 'PUT', self.edit_xml())
        if isinstance(response, FeedResponse) and response.tree.find(qname('gs', 'cell')) is not None:
            self._parse(response.tree)
        return response

    def delete(self) -> FeedResponse|bool:
        """Cells cannot be removed, only emptied"""
        return self.set_value("")
