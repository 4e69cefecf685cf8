from collections.abc import Iterator
import re
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

from .atom import (GSX_NS, coerce_value, entry_fragments, links, qname, split_tag,
                   with_entry_namespaces, xml_safe_column_name, xml_safe_value)
from .feed import FeedResponse
from ..exceptions import MissingConfigurationError

if TYPE_CHECKING:
    from .spreadsheet import GoogleSpreadsheet

class GoogleRow():
    """
    One list feed entry.  The first worksheet row supplies the headers.
    Each gsx: element is matched to the header whose normalized name equals
    its tag, failing that to the header in the same column position.
    Values are kept in an ordered dict keyed by header and are reachable
    with row['header'].

    Columns without a usable header are keyed by their tag instead: a blank
    header arrives as a generated tag like '_cokwr', and the second of two
    identical headers arrives as 'name_2'.

    The entry XML is retained verbatim because saving edits that text in
    place rather than regenerating the entry; the feed is very strict about
    what it accepts on a PUT and round tripping through a parser has not
    produced anything it likes.
    """
    def __init__(self, spreadsheet: "GoogleSpreadsheet", worksheet_id: str,
                 headers: list[str], entry: ET.Element, xml: str) -> None:
        self._spreadsheet = spreadsheet
        self._worksheet_id = worksheet_id
        self._xml = xml
        self.headers = list(headers)
        self.header_map: dict[str, str] = {}
        self.values: dict = {}
        self.id = ""
        self.title = ""
        self.content = ""
        self.links: dict[str, str] = {}
        self._parse(entry)

    def _parse(self, entry: ET.Element) -> None:
        by_tag = {}
        for h in self.headers:
            if h:
                by_tag.setdefault(xml_safe_column_name(h), h)
        idx = 0
        for child in entry:
            ns, local = split_tag(child.tag)
            if ns == GSX_NS:
                header = by_tag.get(local)
                if header is None or header in self.values:
                    header = self.headers[idx] if idx < len(self.headers) else ""
                if not header or header in self.values:
                    header = local
                idx += 1
                self.header_map[header] = local
                self.values[header] = coerce_value(child.text)
            elif child.tag == qname('atom', 'id'):
                self.id = child.text or ""
            elif child.tag == qname('atom', 'title'):
                self.title = child.text or ""
            elif child.tag == qname('atom', 'content'):
                self.content = child.text or ""
        self.links = links(entry)

    def __str__(self) -> str:
        return f"{self.title}:{self.to_dict()}"

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    def __getitem__(self, header: str):
        return self.values[header]

    def __setitem__(self, header: str, value) -> None:
        self.values[header] = value

    def __contains__(self, header: str) -> bool:
        return header in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def get(self, header: str, default=None):
        return self.values.get(header, default)

    @property
    def worksheet_id(self) -> str:
        return self._worksheet_id

    @property
    def xml(self) -> str:
        """The raw entry text this row was parsed from."""
        return self._xml

    def to_dict(self) -> dict:
        """
        Header -> value in column order, including any columns keyed by tag.
        """
        return dict(self.values)

    def edit_xml(self) -> str:
        """
        The retained entry with each mapped gsx: tag replaced by the current value.
        Anything not in this row's header map is left untouched.
        """
        data_xml = with_entry_namespaces(self._xml)
        for header, value in self.values.items():
            tag = self.header_map.get(header)
            if not tag:
                continue
            t = re.escape(tag)
            pattern = re.compile(f"<gsx:{t}(?:\\s*/>|>[\\s\\S]*?</gsx:{t}>)")
            replacement = f"<gsx:{tag}>{xml_safe_value(value)}</gsx:{tag}>"
            data_xml = pattern.sub(lambda m: replacement, data_xml, count=1)
        return data_xml

    def _edit_link(self) -> str:
        link = self.links.get('edit')
        if not link:
            raise MissingConfigurationError("Row has no edit link, use an authenticated 'full' projection")
        return link

    def save(self) -> FeedResponse|bool:
        """
        PUT the edited entry back to its edit link.
        The edit link is versioned so a returned entry replaces the retained one.
        """
        response = self._spreadsheet.make_feed_request(self._edit_link(), 'PUT', self.edit_xml())
        if isinstance(response, FeedResponse):
            fragments = entry_fragments(response.xml)
            self._xml = fragments[0] if fragments else response.xml
            self.links = links(response.tree)
        return response

    def delete(self) -> FeedResponse|bool:
        return self._spreadsheet.make_feed_request(self._edit_link(), 'DELETE')
