"""
Class implementations of the feed records.
The worksheets feed entries are plain groupings of fields so dataclasses
are used, each with a from_entry() to lift one out of the parsed Atom.
Rows and cells carry behaviour and live in row.py and cell.py.
"""
from dataclasses import dataclass, field
from typing import List, Self
import xml.etree.ElementTree as ET

from ..resources import FeedResourceBase
from .atom import entries, qname, text

@dataclass
class Worksheet(FeedResourceBase):
    """
    A worksheets feed entry.  The id is the last segment of the entry id URL,
    which is what the list and cells feeds are addressed by.
    """
    id: str = field(default="")
    title: str = field(default="")
    rowCount: int = field(default=-1)
    colCount: int = field(default=-1)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.rowCount = int(self.rowCount) if self.rowCount not in (None, "") else -1
        self.colCount = int(self.colCount) if self.colCount not in (None, "") else -1

    def __bool__(self) -> bool:
        return bool(self.id)

    def __str__(self) -> str:
        if self:
            return f"{self.title}({self.id})({self.rowCount}Rx{self.colCount}C)"
        return "<invalid worksheet>"

    @classmethod
    def from_entry(cls, entry: ET.Element) -> Self:
        entry_id = text(entry, 'atom', 'id')
        return cls(id=entry_id[entry_id.rfind('/') + 1:],
                   title=text(entry, 'atom', 'title'),
                   rowCount=text(entry, 'gs', 'rowCount'),
                   colCount=text(entry, 'gs', 'colCount'))

@dataclass
class Author(FeedResourceBase):
    name: str = field(default="")
    email: str = field(default="")

    def __bool__(self) -> bool:
        return bool(self.name) or bool(self.email)

    def __str__(self) -> str:
        return f"{self.name}<{self.email}>" if self.email else self.name

    @classmethod
    def from_element(cls, element: ET.Element|None) -> Self:
        if element is None:
            return cls()
        return cls(name=text(element, 'atom', 'name'), email=text(element, 'atom', 'email'))

@dataclass
class SpreadsheetInfo(FeedResourceBase):
    """
    The worksheets feed itself: spreadsheet title, last update, author
    and its worksheets.
    """
    title: str = field(default="")
    updated: str = field(default="")
    author: Author|dict = field(default_factory=dict)
    worksheets: List[Worksheet|dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.author = self.author if isinstance(self.author, Author) else Author(**dict(self.author))
        self.worksheets = [w if isinstance(w, Worksheet) else Worksheet(**dict(w)) for w in self.worksheets]

    def __bool__(self) -> bool:
        return bool(self.title)

    def __str__(self) -> str:
        if not self:
            return 'unconnected'
        return f"{self.title}[{','.join(str(w) for w in self.worksheets)}]"

    @classmethod
    def from_feed(cls, feed: ET.Element) -> Self:
        return cls(title=text(feed, 'atom', 'title'),
                   updated=text(feed, 'atom', 'updated'),
                   author=Author.from_element(feed.find(qname('atom', 'author'))),
                   worksheets=[Worksheet.from_entry(e) for e in entries(feed)])
