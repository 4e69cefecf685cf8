import pytest
from unittest.mock import MagicMock

from gwsfeeds import GoogleSpreadsheet

KEY = "KEY123"
FEEDS = "https://spreadsheets.google.com/feeds"

# --- Canned feed responses ---

WORKSHEETS_FEED = f"""<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns='http://www.w3.org/2005/Atom' xmlns:openSearch='http://a9.com/-/spec/opensearchrss/1.0/' xmlns:gs='http://schemas.google.com/spreadsheets/2006'>
<id>{FEEDS}/worksheets/{KEY}/private/full</id>
<updated>2016-03-01T12:00:00.000Z</updated>
<title type='text'>Inventory</title>
<author><name>owner</name><email>owner@example.com</email></author>
<entry>
<id>{FEEDS}/worksheets/{KEY}/private/full/od6</id>
<updated>2016-03-01T12:00:00.000Z</updated>
<title type='text'>Stock</title>
<gs:rowCount>100</gs:rowCount>
<gs:colCount>20</gs:colCount>
</entry>
<entry>
<id>{FEEDS}/worksheets/{KEY}/private/full/od7</id>
<updated>2016-03-01T12:00:00.000Z</updated>
<title type='text'>Archive</title>
<gs:rowCount>50</gs:rowCount>
<gs:colCount>4</gs:colCount>
</entry>
</feed>
"""

def _cell_entry(row: int, col: int, value: str, numeric: str|None = None) -> str:
    href = f"{FEEDS}/cells/{KEY}/od6/private/full/R{row}C{col}"
    numeric_attr = f" numericValue='{numeric}'" if numeric is not None else ""
    return (f"<entry><id>{href}</id>"
            f"<link rel='self' type='application/atom+xml' href='{href}'/>"
            f"<link rel='edit' type='application/atom+xml' href='{href}/v1'/>"
            f"<gs:cell row='{row}' col='{col}' inputValue='{value}'{numeric_attr}>{value}</gs:cell>"
            f"</entry>")

def cells_feed(*cells: str) -> str:
    return ("<?xml version='1.0' encoding='UTF-8'?>"
            "<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gs='http://schemas.google.com/spreadsheets/2006'>"
            f"<id>{FEEDS}/cells/{KEY}/od6/private/full</id>"
            + "".join(cells) + "</feed>")

HEADER_CELLS_FEED = cells_feed(_cell_entry(1, 1, "Name"),
                               _cell_entry(1, 2, "count"),
                               _cell_entry(1, 3, "Is_A Flag"))

ROW_ENTRY_1 = (f"<entry><id>{FEEDS}/list/{KEY}/od6/private/full/r1</id>"
               "<title type='text'>widget</title>"
               "<content type='text'>count: 10, isaflag: TRUE</content>"
               f"<link rel='self' type='application/atom+xml' href='{FEEDS}/list/{KEY}/od6/private/full/r1'/>"
               f"<link rel='edit' type='application/atom+xml' href='{FEEDS}/list/{KEY}/od6/private/full/r1/v1'/>"
               "<gsx:name>widget</gsx:name><gsx:count>10</gsx:count><gsx:isaflag>TRUE</gsx:isaflag>"
               "</entry>")

ROW_ENTRY_2 = (f"<entry><id>{FEEDS}/list/{KEY}/od6/private/full/r2</id>"
               "<title type='text'>007</title>"
               "<content type='text'>count: 2.5</content>"
               f"<link rel='edit' type='application/atom+xml' href='{FEEDS}/list/{KEY}/od6/private/full/r2/v3'/>"
               "<gsx:name>007</gsx:name><gsx:count>2.5</gsx:count><gsx:isaflag></gsx:isaflag>"
               "</entry>")

def list_feed(*rows: str) -> str:
    return ("<?xml version='1.0' encoding='UTF-8'?>"
            "<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gsx='http://schemas.google.com/spreadsheets/2006/extended'>"
            f"<id>{FEEDS}/list/{KEY}/od6/private/full</id>"
            + "".join(rows) + "</feed>")

LIST_FEED = list_feed(ROW_ENTRY_1, ROW_ENTRY_2)

def created_row(name: str, count: str, flag: str) -> str:
    return ("<?xml version='1.0' encoding='UTF-8'?>"
            "<entry xmlns='http://www.w3.org/2005/Atom' xmlns:gsx='http://schemas.google.com/spreadsheets/2006/extended'>"
            f"<id>{FEEDS}/list/{KEY}/od6/private/full/r9</id>"
            f"<title type='text'>{name}</title>"
            f"<link rel='edit' type='application/atom+xml' href='{FEEDS}/list/{KEY}/od6/private/full/r9/v1'/>"
            f"<gsx:name>{name}</gsx:name><gsx:count>{count}</gsx:count><gsx:isaflag>{flag}</gsx:isaflag>"
            "</entry>")


def make_response(text: str = "", status: int = 200, reason: str = "OK",
                  content_type: str = "application/atom+xml; charset=UTF-8"):
    response = MagicMock()
    response.status_code = status
    response.reason = reason
    response.text = text
    response.headers = {'content-type': content_type}
    return response


@pytest.fixture
def session():
    """
    Stand-in for requests.Session, queue responses on session.responses
    and they are handed out in order.
    """
    s = MagicMock()
    s.responses = []
    s.request.side_effect = lambda method, url, **kwargs: s.responses.pop(0)
    return s

@pytest.fixture
def respond(session):
    def _respond(*bodies, **kwargs):
        for b in bodies:
            session.responses.append(b if isinstance(b, MagicMock) else make_response(b, **kwargs))
    return _respond

@pytest.fixture
def doc(session):
    return GoogleSpreadsheet(KEY, auth={'type': 'Bearer', 'value': 'tok'}, session=session)

@pytest.fixture
def anonymous_doc(session):
    return GoogleSpreadsheet(KEY, session=session)
