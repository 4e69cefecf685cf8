from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
import copy
import datetime
import json
import logging

import google.auth
import google.auth.exceptions
from google.auth.credentials import Credentials as BaseCredentials
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .exceptions import MissingConfigurationError

logger = logging.getLogger(__name__)

FEED_SCOPE = "https://spreadsheets.google.com/feeds"

class __GWSFeedAccess():
    """
    Default configuration and user authentication for the legacy Sheets feeds.
    See https://developers.google.com/workspace/guides/create-credentials#choose_the_access_credential_that_is_right_for_you
    for an overview of what you'll need.  Once you've obtained a secrets file you can refer the object to it
    for authentication.  For OAuth it will trigger the confirmation screens.  Sessions will be preserved
    and refreshed so confirmation does not need to happen repeatedly.

    Spreadsheet handles each own a FeedAuth, this singleton only holds the shared
    configuration and the installed-app flow that produces user credentials.
    """

    __SCOPES = {
        "feeds": FEED_SCOPE,
        "sheets": "https://www.googleapis.com/auth/spreadsheets",
        "sheets-ro": "https://www.googleapis.com/auth/spreadsheets.readonly",
        "drive": "https://www.googleapis.com/auth/drive",
        "drive-ro": "https://www.googleapis.com/auth/drive.readonly",
    }
    __SCOPE_URL_PREFIXES = ("https://www.googleapis.com/", "https://spreadsheets.google.com/")

    __DEFAULT_AUTH_PROMPT_MSG = "Please visit this URL to authorize spreadsheet access: {url}"
    __DEFAULT_AUTH_FLOW_SUCCESS_MSG = "Spreadsheet access authorized, you may close this window."
    __DEFAULT_SECRETS = str((Path.home() / "gws_client_secrets.json").absolute())
    __DEFAULT_CACHE = str((Path.home() / "gws_feed_tokens.json").absolute())
    __DEFAULT_TIMEOUT = 30.0

    def __init__(self) -> None:
        self.reset()

    def __bool__(self) -> bool:
        """True is we are connected and authenticated"""
        return self.connected

    def __str__(self) -> str:
        if self.connected:
            return f"Connected:{str(self.session_scopes)}"
        return f"Disconnected:{str(self.__scopes)}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @classmethod
    def get_scope(cls, scope: str) -> str:
        """
        Get a scope based on simplified label.
        A raw URL will also be expected.
        """
        s = str(scope)
        sc = cls.__SCOPES.get(s, "")
        if not sc and s.startswith(cls.__SCOPE_URL_PREFIXES):
            sc = s
        return sc

    @property
    def client_secrets(self) -> Path:
        """
        Path to client secrets file as provided by Google when generating access credentials.
        """
        return self.__secrets

    @client_secrets.setter
    def client_secrets(self, value: Path|str) -> None:
        val = value if isinstance(value, Path) else Path(str(value))
        if val != self.__secrets:
            self.__secrets = val
            self.__creds = None

    @property
    def cred_cache(self) -> Path:
        """
        Path to local credential cache to not have to do full authentication each time.
        """
        return self.__cache

    @cred_cache.setter
    def cred_cache(self, value: Path|str):
        val = value if isinstance(value, Path) else Path(str(value))
        if val != self.__cache:
            self.__cache = val
            self.__creds = None

    @property
    def connected(self) -> bool:
        """
        Are we authenticated with Google?
        """
        return bool(self.__creds) and bool(self.__creds.valid)

    @property
    def session_scopes(self) -> list[str]:
        if self.connected:
            return list(self.__creds.scopes or [])
        return []

    @property
    def scopes(self) -> list[str]:
        """
        The scopes requested or to be requested on next authentication sequence.
        Always contains at least the feeds scope.
        """
        return self.__scopes

    @scopes.setter
    def scopes(self, value: None|list[str]|str) -> None:
        slist = [FEED_SCOPE]
        if value is not None:
            vals = [value] if isinstance(value, str) or not isinstance(value, Iterable) else value
            for v in vals:
                s = self.get_scope(str(v))
                if s and s not in slist:
                    slist.append(s)
        self.__scopes = slist
        self.__creds = None

    @property
    def creds(self) -> Credentials|None:
        return self.__creds

    @property
    def config(self) -> dict:
        """
        Get all configuration state as a dict.
        Convenience for getting it all at once for pushing into a json, toml, ini, etc, file.
        """
        config = {
            'secrets': str(self.__secrets),
            'cache': str(self.__cache),
            'scopes': self.__scopes,
            'server': self.auth_server,
            'port': self.auth_port,
            'timeout': self.timeout
        }
        return config

    @config.setter
    def config(self, config: dict) -> None:
        """
        Set configuration state from a dict.
        Convenience method for inserting state pulled from a config file or equivalent.
        """
        v = config.get('port', None)
        if v is not None:
            self.auth_port = int(v)
        v = config.get('server', None)
        if v is not None:
            self.auth_server = str(v)
        v = config.get('timeout', None)
        if v is not None:
            self.timeout = float(v)
        v = config.get('scopes', [])
        if v:
            self.scopes = v
        v = config.get('cache', None)
        if v is not None:
            self.cred_cache = v
        v = config.get('secrets', None)
        if v is not None:
            self.client_secrets = v
        v = config.get('auth_prompt_msg', None)
        if v is not None:
            self.auth_prompt_msg = str(v)
        v = config.get('flow_success_msg', None)
        if v is not None:
            self.auth_flow_success_msg = str(v)

    def reset(self) -> None:
        """
        Reset all connection state to defaults.
        """
        self.__secrets = Path(self.__DEFAULT_SECRETS)
        self.__cache = Path(self.__DEFAULT_CACHE)
        self.__creds = None
        self.__scopes = [FEED_SCOPE]
        self.auth_server = 'localhost'
        self.auth_port = 0
        self.auth_prompt_msg = self.__DEFAULT_AUTH_PROMPT_MSG
        self.auth_flow_success_msg = self.__DEFAULT_AUTH_FLOW_SUCCESS_MSG
        self.timeout = self.__DEFAULT_TIMEOUT

    def connect(self) -> BaseCredentials|None:
        """
        Establish a new user authentication session.
        If successful will save the credentials in the cache file to reuse
        on subsequent invocations.  Falls back to application default
        credentials (GOOGLE_APPLICATION_CREDENTIALS etc) when there is no
        secrets file.
        """
        self.__creds = None
        requested_scopes = copy.copy(self.__scopes)
        if (self.__cache.exists() and self.__cache.is_file()):
            # the cache doesnt know what scopes it was granted for
            # so we stash them alongside and check before reuse
            cf = self.__cache.resolve()
            with open(cf, 'r', encoding='utf-8') as f:
                j = json.load(f)
            scopes = j.get('scopes',[])
            if not all(s in scopes for s in requested_scopes):
                self.__cache.unlink()
            else:
                self.__creds = Credentials.from_authorized_user_file(str(cf), requested_scopes)
        if not self.connected:
            if self.__creds and self.__creds.refresh_token:
                try:
                    self.__creds.refresh(Request())
                except google.auth.exceptions.RefreshError as e:
                    logger.warning("failed to refresh stored creds: %s, deleting cred cache and re-authorizing", e)
                finally:
                    if not self.connected:
                        self.__cache.unlink(missing_ok=True)

            if not self.connected:
                if self.__secrets.exists() and self.__secrets.is_file():
                    flow = InstalledAppFlow.from_client_secrets_file(str(self.__secrets), requested_scopes)
                    self.__creds = flow.run_local_server(host=self.auth_server, port=self.auth_port,
                                                         authorization_prompt_message=self.auth_prompt_msg,
                                                         success_message=self.auth_flow_success_msg
                                                         )
                else:
                    try:
                        self.__creds, _ = google.auth.default(requested_scopes)
                        if not self.__creds.valid:
                            self.__creds.refresh(Request())
                    except google.auth.exceptions.DefaultCredentialsError:
                        logger.debug("no secrets file and no application default credentials")
                        self.__creds = None
                    return self.__creds if self.connected else None

            if self.connected:
                user_info = {'refresh_token': self.__creds.refresh_token, 'client_id': self.__creds.client_id,
                             'client_secret': self.__creds.client_secret, 'scopes': requested_scopes}
                with open(self.__cache.resolve(), 'w', encoding='utf-8') as f:
                    json.dump(user_info, f, ensure_ascii=False, indent=2)
        return self.__creds if self.connected else None

gws = __GWSFeedAccess()


def load_service_account(creds: dict|str|Path|service_account.Credentials,
                         scopes: list[str]|None = None) -> service_account.Credentials:
    """
    Build service account credentials from the parsed key file dict,
    a path to the key file, or pass through existing credentials.
    The scopes default to the feed scope.
    """
    scopes = scopes or [FEED_SCOPE]
    if isinstance(creds, service_account.Credentials):
        return creds if creds.scopes else creds.with_scopes(scopes)
    if isinstance(creds, (str, Path)):
        return service_account.Credentials.from_service_account_file(str(creds), scopes=scopes)
    if not creds or 'client_email' not in creds or 'private_key' not in creds:
        raise MissingConfigurationError("Service account info needs client_email and private_key")
    return service_account.Credentials.from_service_account_info(dict(creds), scopes=scopes)


def _utcnow() -> datetime.datetime:
    # google-auth keeps expiry as naive UTC
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


@dataclass
class FeedToken():
    """
    An access token for the feed endpoints.  'Bearer' tokens come from OAuth2
    and service accounts, anything else is treated as a legacy ClientLogin token.
    """
    value: str
    type: str = field(default="GoogleLogin")
    expires: datetime.datetime|None = field(default=None)

    @classmethod
    def make(cls, token: "FeedToken|dict|str") -> "FeedToken":
        if isinstance(token, FeedToken):
            return token
        if isinstance(token, dict):
            return cls(str(token['value']), str(token.get('type', 'GoogleLogin')), token.get('expires', None))
        return cls(str(token))

    @property
    def header(self) -> str:
        if self.type == 'Bearer':
            return f"Bearer {self.value}"
        return f"GoogleLogin auth={self.value}"


class FeedAuth():
    """
    Credential holder for one spreadsheet handle.
    Modes are 'anonymous' (no header), 'token' (static token) and 'jwt'
    (google-auth credentials renewed on expiry, normally a service account).
    """
    def __init__(self, token: FeedToken|dict|str|None = None) -> None:
        self.token = FeedToken.make(token) if token else None
        self.mode = 'token' if self.token else 'anonymous'
        self.credentials = None

    def __bool__(self) -> bool:
        return self.token is not None

    def __str__(self) -> str:
        return f"{self.mode}:{'authorized' if self else 'unauthorized'}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    def set_token(self, token: FeedToken|dict|str) -> None:
        if self.mode == 'anonymous':
            self.mode = 'token'
        self.token = FeedToken.make(token)

    def use_credentials(self, credentials: BaseCredentials, request: Request|None = None) -> None:
        """
        Switch to renewing credentials and fetch the first token.
        """
        self.credentials = credentials
        self.renew(request)

    @property
    def expired(self) -> bool:
        if self.token is None:
            return True
        if self.token.expires is None:
            return False
        return self.token.expires <= _utcnow()

    def renew(self, request: Request|None = None) -> FeedToken:
        """
        One refresh round trip through google-auth.  Errors propagate.
        """
        if self.credentials is None:
            raise MissingConfigurationError("No credentials to renew the feed token with")
        self.mode = 'jwt'
        self.credentials.refresh(request or Request())
        self.token = FeedToken(self.credentials.token, 'Bearer', self.credentials.expiry)
        logger.debug("renewed feed token, expires %s", self.token.expires)
        return self.token

    def authorization(self, request: Request|None = None) -> str|None:
        """
        The Authorization header value, renewing first if the jwt token has lapsed.
        """
        if self.mode == 'jwt' and self.expired:
            self.renew(request)
        if self.token is None:
            return None
        return self.token.header
