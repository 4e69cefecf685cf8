from dataclasses import dataclass
from http import HTTPStatus
import logging
import xml.etree.ElementTree as ET

import requests
from google.auth.transport.requests import Request

from . import GOOGLE_FEED_URL
from .atom import parse
from ..access import FeedAuth, gws
from ..exceptions import AuthorizationError, FeedHTTPError, PrivateSheetError

logger = logging.getLogger(__name__)

@dataclass
class FeedResponse():
    """
    A parsed feed body along with the raw text it came from.
    The raw text is what the row edits work on.
    """
    tree: ET.Element
    xml: str


def _query_value(val) -> str:
    # the feeds want lower case booleans
    if isinstance(val, bool):
        return "true" if val else "false"
    return str(val)


class FeedClient():
    """
    Builds feed URLs, attaches authorization and maps the HTTP response.
    One instance per spreadsheet handle, which adjusts the visibility and
    projection as its auth changes.
    """
    def __init__(self, auth: FeedAuth|None = None,
                 visibility: str = 'public',
                 projection: str = 'values',
                 session: requests.Session|None = None,
                 timeout: float|None = None) -> None:
        self.auth = auth if auth is not None else FeedAuth()
        self.visibility = visibility
        self.projection = projection
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def __str__(self) -> str:
        return f"{self.visibility}/{self.projection}:{str(self.auth)}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    def url(self, url_params: list[str]|str) -> str:
        """
        A list of path segments gets the visibility and projection appended.
        A string is taken as a complete URL, which is how edit links arrive.
        """
        if isinstance(url_params, str):
            return url_params
        segments = [str(p) for p in url_params] + [self.visibility, self.projection]
        return GOOGLE_FEED_URL + "/".join(segments)

    def headers(self, method: str) -> dict[str, str]:
        headers = {}
        authorization = self.auth.authorization(Request(self.session))
        if authorization:
            headers['Authorization'] = authorization
        if method in ('POST', 'PUT'):
            headers['Content-Type'] = 'application/atom+xml'
        return headers

    def request(self, url_params: list[str]|str, method: str = 'GET',
                query_or_data: dict|str|None = None) -> FeedResponse|bool:
        """
        Issue one feed request.
        For GET query_or_data is the query mapping, for POST/PUT the XML body.
        Returns the parsed body or True when the service sent nothing back.
        """
        url = self.url(url_params)
        headers = self.headers(method)
        params = None
        data = None
        if method == 'GET' and query_or_data:
            params = {k: _query_value(v) for k, v in dict(query_or_data).items()}
        elif method in ('POST', 'PUT'):
            data = query_or_data.encode('utf-8') if isinstance(query_or_data, str) else query_or_data

        logger.debug("%s %s %s", method, url, params or "")
        response = self.session.request(method, url, params=params, data=data, headers=headers,
                                        timeout=self.timeout if self.timeout is not None else gws.timeout)
        return self.handle(response)

    def handle(self, response: requests.Response) -> FeedResponse|bool:
        status = response.status_code
        if status == 401:
            raise AuthorizationError("Invalid authorization key.")
        if status >= 400:
            reason = response.reason
            if not reason:
                try:
                    reason = HTTPStatus(status).phrase
                except ValueError:
                    reason = ""
            raise FeedHTTPError(status, reason, response.text)
        if status == 200 and 'text/html' in response.headers.get('content-type', ''):
            raise PrivateSheetError("Sheet is private. Use authentication or make public.")

        body = response.text
        if body:
            return FeedResponse(parse(body), body)
        return True
