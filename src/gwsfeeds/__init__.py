"""
A client for the legacy Google Sheets XML feeds (worksheets, list and cells).
The goal is to hide the Atom plumbing: authentication, feed URLs, and the
translation between feed entries and plain records.

Python dataclasses are used for the worksheet records, rows and cells are
small classes that keep a reference to their spreadsheet so they can be
saved or deleted in place.
"""

from .access import FeedAuth, FeedToken, gws, load_service_account
from .exceptions import (AuthorizationError, EmptyResponseError, FeedHTTPError, FeedParseError,
                         GoogleSheetsFeedError, MissingConfigurationError, PrivateSheetError)
from .sheets.cell import GoogleCell
from .sheets.resources import Author, SpreadsheetInfo, Worksheet
from .sheets.row import GoogleRow
from .sheets.sheet import GoogleWorksheet
from .sheets.spreadsheet import GoogleSpreadsheet
