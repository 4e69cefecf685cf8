from collections.abc import Mapping
from pathlib import Path
import logging

import requests
from google.auth.credentials import Credentials as BaseCredentials
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from . import PROJECTIONS, VISIBILITIES
from .atom import (entries, entry_fragments, xml_safe_column_name, xml_safe_value, ATOM_NS, GSX_NS)
from .cell import GoogleCell
from .feed import FeedClient, FeedResponse
from .resources import SpreadsheetInfo
from .row import GoogleRow
from .sheet import GoogleWorksheet
from ..access import FeedAuth, FeedToken, gws, load_service_account
from ..exceptions import EmptyResponseError, MissingConfigurationError

logger = logging.getLogger(__name__)

# entry fields that are never sent as columns
_RESERVED_ROW_KEYS = ('id', 'title', 'content', '_links')

class GoogleSpreadsheet():
    """
    Handle on one spreadsheet, addressed by its key.
    Without credentials the public/values feeds are used, once a token or
    credentials are supplied it switches to private/full unless visibility
    or projection were given explicitly.

    The headers of each worksheet (the first row) and the header -> gsx tag
    mapping are cached per worksheet id on first row access and kept until
    invalidate_headers() is called.
    """
    def __init__(self, key: str, auth: FeedToken|dict|str|None = None,
                 visibility: str|None = None,
                 projection: str|None = None,
                 session: requests.Session|None = None) -> None:
        if not key:
            raise MissingConfigurationError("Spreadsheet key not provided.")
        if visibility is not None and visibility not in VISIBILITIES:
            raise ValueError(f"Invalid visibility: {visibility}")
        if projection is not None and projection not in PROJECTIONS:
            raise ValueError(f"Invalid projection: {projection}")
        self._key = key
        self._visibility = visibility
        self._projection = projection
        self._client = FeedClient(FeedAuth(auth), session=session)
        self._info = SpreadsheetInfo()
        self.headers: dict[str, list[str]] = {}
        self.header_map: dict[str, dict[str, str]] = {}
        self._set_auth_dependencies()

    def __bool__(self) -> bool:
        return bool(self._info)

    def __str__(self) -> str:
        return f"{self._key}:{str(self._info)}"

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    def __len__(self) -> int:
        """
        In this context length is the number of worksheets seen by the last get_info().
        Or 0 if never fetched.
        """
        return len(self._info.worksheets)

    def __contains__(self, val: str) -> bool:
        """
        Is the worksheet in this spreadsheet?  Matches either id or title.
        """
        return any(w.id == val or w.title == val for w in self._info.worksheets)

    def __getitem__(self, item: str|int) -> GoogleWorksheet:
        """
        Get a worksheet.  A string matches id first then title,
        an int is the position in the worksheets feed.
        """
        if isinstance(item, int):
            try:
                return GoogleWorksheet(self, self._info.worksheets[item])
            except IndexError:
                raise KeyError(f"{item} not in worksheets[]") from None
        for w in self._info.worksheets:
            if w.id == item:
                return GoogleWorksheet(self, w)
        for w in self._info.worksheets:
            if w.title == item:
                return GoogleWorksheet(self, w)
        raise KeyError(f"{item} not in worksheets[]")

    @property
    def key(self) -> str:
        return self._key

    @property
    def info(self) -> SpreadsheetInfo:
        return self._info

    @property
    def title(self) -> str:
        return self._info.title if self._info else 'unconnected'

    @property
    def worksheets(self) -> list[GoogleWorksheet]:
        return [GoogleWorksheet(self, w) for w in self._info.worksheets]

    @property
    def auth(self) -> FeedAuth:
        return self._client.auth

    @property
    def visibility(self) -> str:
        return self._client.visibility

    @property
    def projection(self) -> str:
        return self._client.projection

    def _set_auth_dependencies(self) -> None:
        authed = bool(self._client.auth)
        self._client.visibility = self._visibility or ('private' if authed else 'public')
        self._client.projection = self._projection or ('full' if authed else 'values')

    # Authentication

    def set_auth_token(self, token: FeedToken|dict|str) -> None:
        """
        Use a static token.  A plain string is sent as a GoogleLogin token,
        use a FeedToken or {'type': 'Bearer', 'value': ...} for OAuth2 tokens.
        """
        self._client.auth.set_token(token)
        self._set_auth_dependencies()

    def use_credentials(self, credentials: BaseCredentials) -> None:
        """
        Use any google-auth credentials, renewed whenever the token expires.
        """
        self._client.auth.use_credentials(credentials, Request(self._client.session))
        self._set_auth_dependencies()

    def use_service_account_auth(self, creds: dict|str|Path|service_account.Credentials) -> None:
        """
        Authenticate as a service account.  creds is the parsed key file,
        the path to it, or ready made credentials.  The first token is
        fetched straight away so bad keys fail here.
        """
        self.use_credentials(load_service_account(creds))

    def use_user_auth(self) -> None:
        """
        Authenticate as a user through the shared installed-app flow.
        """
        creds = gws.connect()
        if creds is None:
            raise MissingConfigurationError("No user credentials available, check client secrets")
        self.use_credentials(creds)

    def make_feed_request(self, url_params: list[str]|str, method: str = 'GET',
                          query_or_data: dict|str|None = None) -> FeedResponse|bool:
        return self._client.request(url_params, method, query_or_data)

    # Feed operations

    def get_info(self) -> SpreadsheetInfo:
        """
        Spreadsheet title, update time, author and worksheets.
        """
        response = self.make_feed_request(["worksheets", self._key], 'GET')
        if response is True:
            raise EmptyResponseError("No response to get_info call")
        self._info = SpreadsheetInfo.from_feed(response.tree)
        return self._info

    def invalidate_headers(self, worksheet_id: str|None = None) -> None:
        """
        Drop cached headers, for one worksheet or all of them.
        """
        if worksheet_id is None:
            self.headers.clear()
            self.header_map.clear()
        else:
            self.headers.pop(str(worksheet_id), None)
            self.header_map.pop(str(worksheet_id), None)

    def _fetch_headers(self, worksheet_id: str) -> list[str]:
        cells = self.get_cells(worksheet_id, max_row=1, return_empty=True)
        headers = [str(c.value) for c in sorted(cells, key=lambda c: c.col)]
        logger.debug("fetched headers for worksheet %s: %s", worksheet_id, headers)
        return headers

    def get_rows(self, worksheet_id: str, start: int|None = None,
                 num: int|None = None,
                 orderby: str|None = None,
                 reverse: bool|None = None,
                 query: str|None = None) -> list[GoogleRow]:
        """
        Rows of the list feed.  The first worksheet row is the headers and
        is not returned.  The headers are fetched on first use.
        start is 1-based, query is a structured query like 'age > 25'.
        """
        worksheet_id = str(worksheet_id)
        headers = self.headers.get(worksheet_id)
        if headers is None:
            headers = self._fetch_headers(worksheet_id)

        params = {}
        if start:
            params['start-index'] = start
        if num:
            params['max-results'] = num
        if orderby:
            params['orderby'] = orderby
        if reverse:
            params['reverse'] = reverse
        if query:
            params['sq'] = query

        response = self.make_feed_request(["list", self._key, worksheet_id], 'GET', params)
        if response is True:
            raise EmptyResponseError("No response to get_rows call")

        fragments = entry_fragments(response.xml)
        rows = [GoogleRow(self, worksheet_id, headers, entry, fragment)
                for entry, fragment in zip(entries(response.tree), fragments)]

        self.headers.setdefault(worksheet_id, headers)
        if worksheet_id not in self.header_map:
            if rows:
                self.header_map[worksheet_id] = dict(rows[0].header_map)
            else:
                self.header_map[worksheet_id] = {h: xml_safe_column_name(h) for h in headers if h}
        return rows

    def add_row(self, worksheet_id: str, data: Mapping) -> GoogleRow:
        """
        Append a row.  data is header -> value, headers not in the sheet
        are sent under their normalized name and ignored by the service.
        """
        worksheet_id = str(worksheet_id)
        if worksheet_id not in self.header_map:
            self.get_rows(worksheet_id, num=1)
        header_map = self.header_map[worksheet_id]

        data_xml = f'<entry xmlns="{ATOM_NS}" xmlns:gsx="{GSX_NS}">\n'
        for key, value in data.items():
            if key in _RESERVED_ROW_KEYS:
                continue
            tag = xml_safe_column_name(header_map.get(key) or key)
            data_xml += f"<gsx:{tag}>{xml_safe_value(value)}</gsx:{tag}>\n"
        data_xml += '</entry>'

        response = self.make_feed_request(["list", self._key, worksheet_id], 'POST', data_xml)
        if response is True:
            raise EmptyResponseError("No response to add_row call")
        fragments = entry_fragments(response.xml)
        return GoogleRow(self, worksheet_id, self.headers[worksheet_id], entries(response.tree)[0],
                         fragments[0] if fragments else response.xml)

    def get_cells(self, worksheet_id: str, min_row: int|None = None,
                  max_row: int|None = None,
                  min_col: int|None = None,
                  max_col: int|None = None,
                  return_empty: bool|None = None) -> list[GoogleCell]:
        """
        Cells of the cells feed, optionally bounded.  return_empty includes
        blank cells inside the bounds.
        """
        worksheet_id = str(worksheet_id)
        params = {}
        for name, val in (('min-row', min_row), ('max-row', max_row),
                          ('min-col', min_col), ('max-col', max_col),
                          ('return-empty', return_empty)):
            if val is not None:
                params[name] = val

        response = self.make_feed_request(["cells", self._key, worksheet_id], 'GET', params)
        if response is True:
            raise EmptyResponseError("No response to get_cells call")
        return [GoogleCell(self, worksheet_id, entry) for entry in entries(response.tree)]
