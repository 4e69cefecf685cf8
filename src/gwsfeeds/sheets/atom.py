"""
Helpers for the Atom XML the feeds speak.
Responses are parsed with ElementTree into a generic element tree and read
from there.  Requests, and the row edit, are built as text since the feeds
are very particular about what XML they accept.
"""
import re
import xml.etree.ElementTree as ET

from ..exceptions import FeedParseError

ATOM_NS = "http://www.w3.org/2005/Atom"
GS_NS = "http://schemas.google.com/spreadsheets/2006"
GSX_NS = "http://schemas.google.com/spreadsheets/2006/extended"
OPENSEARCH_NS = "http://a9.com/-/spec/opensearchrss/1.0/"
GD_NS = "http://schemas.google.com/g/2005"

NAMESPACES = {
    'atom': ATOM_NS,
    'gs': GS_NS,
    'gsx': GSX_NS,
    'openSearch': OPENSEARCH_NS,
    'gd': GD_NS,
}

_ENTRY_RE = re.compile(r"<entry[^>]*>[\s\S]*?</entry>")
_ENTRY_OPEN_RE = re.compile(r"^<entry(\s[^>]*)?>")
_INT_RE = re.compile(r"^\s*[-+]?\d+\s*$", re.ASCII)
_NUMBER_RE = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$", re.ASCII)

ENTRY_NAMESPACE_ATTRS = f"xmlns='{ATOM_NS}' xmlns:gsx='{GSX_NS}'"


def parse(xml: str) -> ET.Element:
    try:
        return ET.fromstring(xml)
    except ET.ParseError as e:
        raise FeedParseError(f"Malformed feed response: {e}") from e


def qname(prefix: str, tag: str) -> str:
    """ElementTree style '{namespace}tag' name"""
    return f"{{{NAMESPACES[prefix]}}}{tag}"


def split_tag(tag: str) -> tuple[str, str]:
    """
    Split an ElementTree tag into (namespace, local name).
    """
    if tag.startswith('{'):
        ns, _, local = tag[1:].partition('}')
        return ns, local
    return "", tag


def text(element: ET.Element, prefix: str, tag: str, default: str = "") -> str:
    child = element.find(qname(prefix, tag))
    if child is None or child.text is None:
        return default
    return child.text


def entries(feed: ET.Element) -> list[ET.Element]:
    """
    Entries of a feed.  A POST/PUT answers with a bare entry which is
    treated as a feed of one.
    """
    if feed.tag == qname('atom', 'entry'):
        return [feed]
    return feed.findall(qname('atom', 'entry'))


def links(entry: ET.Element) -> dict[str, str]:
    """
    The entry links keyed by rel, which is what we need for edit/self
    """
    return {link.get('rel'): link.get('href') for link in entry.findall(qname('atom', 'link'))
            if link.get('rel')}


def entry_fragments(xml: str) -> list[str]:
    """
    The verbatim text of each <entry> in a raw response, in document order.
    """
    return [m.group(0) for m in _ENTRY_RE.finditer(xml)]


def with_entry_namespaces(fragment: str) -> str:
    """
    An entry cut out of a feed loses the namespace declarations of the feed,
    put the atom and gsx ones back on the opening tag.
    """
    m = _ENTRY_OPEN_RE.match(fragment)
    if not m or 'xmlns=' in (m.group(1) or ""):
        return fragment
    attrs = m.group(1) or ""
    extra = f" xmlns:gd='{GD_NS}'" if 'gd:' in attrs and 'xmlns:gd' not in attrs else ""
    return f"<entry {ENTRY_NAMESPACE_ATTRS}{extra}{attrs}>" + fragment[m.end():]


def xml_safe_value(val) -> str:
    if val is None:
        return ""
    if isinstance(val, bool):
        return "TRUE" if val else "FALSE"
    return (str(val).replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;'))


def xml_safe_column_name(val) -> str:
    """
    Column tags are the header with whitespace and underscores dropped, lower cased.
    """
    if not val:
        return ""
    return re.sub(r"[\s_]+", "", str(val)).lower()


def coerce_value(val: str|None) -> str|int|float|bool|None:
    """
    Read side conversion of a list feed value.
    Numeric looking strings are always converted, leading zeros and all.
    """
    if val is None:
        return None
    if val == 'TRUE':
        return True
    if val == 'FALSE':
        return False
    if _INT_RE.match(val):
        return int(val)
    if _NUMBER_RE.match(val):
        return float(val)
    return val
