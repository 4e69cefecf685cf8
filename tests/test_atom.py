import pytest

from gwsfeeds.exceptions import FeedParseError
from gwsfeeds.sheets import atom
from tests.conftest import LIST_FEED, ROW_ENTRY_1, ROW_ENTRY_2

def test_coerce_value():
    assert(atom.coerce_value(None) is None)
    assert(atom.coerce_value("TRUE") is True)
    assert(atom.coerce_value("FALSE") is False)
    assert(atom.coerce_value("10") == 10)
    assert(isinstance(atom.coerce_value("10"), int))
    assert(atom.coerce_value("-2.5") == -2.5)
    assert(atom.coerce_value("1e3") == 1000.0)
    # leading zeros are not preserved
    assert(atom.coerce_value("007") == 7)
    assert(atom.coerce_value("") == "")
    assert(atom.coerce_value("true") == "true")
    assert(atom.coerce_value("12 apples") == "12 apples")
    assert(atom.coerce_value("nan") == "nan")
    # only ASCII digits count as numbers
    assert(atom.coerce_value("\u0663") == "\u0663")
    assert(atom.coerce_value("\uff11\uff12") == "\uff11\uff12")

def test_xml_safe_value():
    assert(atom.xml_safe_value(None) == "")
    assert(atom.xml_safe_value(True) == "TRUE")
    assert(atom.xml_safe_value(False) == "FALSE")
    assert(atom.xml_safe_value(10) == "10")
    assert(atom.xml_safe_value('a < b & "c" > d') == 'a &lt; b &amp; &quot;c&quot; &gt; d')

def test_xml_safe_column_name():
    assert(atom.xml_safe_column_name("Is_A Flag") == "isaflag")
    assert(atom.xml_safe_column_name("1row headers") == "1rowheaders")
    assert(atom.xml_safe_column_name("test.of") == "test.of")
    assert(atom.xml_safe_column_name(None) == "")

def test_entry_fragments():
    fragments = atom.entry_fragments(LIST_FEED)
    assert(fragments == [ROW_ENTRY_1, ROW_ENTRY_2])
    assert(atom.entry_fragments("<feed></feed>") == [])

def test_with_entry_namespaces():
    fixed = atom.with_entry_namespaces("<entry><gsx:a>1</gsx:a></entry>")
    assert(fixed.startswith(f"<entry xmlns='{atom.ATOM_NS}' xmlns:gsx='{atom.GSX_NS}'>"))
    assert(fixed.endswith("<gsx:a>1</gsx:a></entry>"))

    etagged = atom.with_entry_namespaces("<entry gd:etag='&quot;x&quot;'><id>1</id></entry>")
    assert(f"xmlns:gd='{atom.GD_NS}' gd:etag='&quot;x&quot;'>" in etagged)

    declared = f"<entry xmlns='{atom.ATOM_NS}'><id>1</id></entry>"
    assert(atom.with_entry_namespaces(declared) == declared)

def test_parse_and_links():
    feed = atom.parse(LIST_FEED)
    entries = atom.entries(feed)
    assert(len(entries) == 2)
    links = atom.links(entries[0])
    assert(links['edit'].endswith("/r1/v1"))
    assert(links['self'].endswith("/r1"))
    assert(atom.text(entries[0], 'atom', 'title') == "widget")
    assert(atom.text(entries[0], 'atom', 'missing', 'none') == "none")

def test_entries_of_bare_entry():
    entry = atom.parse(f"<entry xmlns='{atom.ATOM_NS}'><id>x</id></entry>")
    assert(atom.entries(entry) == [entry])

def test_parse_error():
    with pytest.raises(FeedParseError):
        atom.parse("<feed><entry></feed>")
