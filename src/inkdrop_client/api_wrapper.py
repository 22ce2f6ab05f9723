"""API wrapper for the Inkdrop local HTTP server.

This module wraps a requests Session configured for the Inkdrop local server
and provides error translation from HTTP exceptions to our typed exception
hierarchy. There is no retry logic: failures propagate to the caller.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from src.models.note import ChangesResult, Note, NoteFile, Tag

from .auth import Authenticator
from .errors import (
    APIAccessError,
    APIUnreachableError,
    DocumentNotFoundError,
    InvalidCredentialsError,
    MalformedResponseError,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class APIWrapper:
    """Thin client for the Inkdrop local server.

    This class:
    1. Attaches Basic credentials from the Authenticator to every request
    2. Translates HTTP failures to typed exceptions
    3. Decodes responses into the models of src.models

    Example:
        >>> api = APIWrapper(Authenticator())
        >>> seq = api.get_latest_seq()
        >>> notes = api.get_notes("book:tjnPbJakw")
    """

    def __init__(self, authenticator: Authenticator):
        """Initialize the API wrapper.

        Args:
            authenticator: Authenticator instance supplying credentials
        """
        self._authenticator = authenticator
        self._session: Optional[requests.Session] = None

    def _get_session(self) -> requests.Session:
        """Get or create the HTTP session.

        The session is created lazily on first use so that missing
        credentials surface on the first request, not at construction.

        Raises:
            InvalidCredentialsError: If credentials are missing
        """
        if self._session is None:
            creds = self._authenticator.get_credentials()
            session = requests.Session()
            session.auth = (creds.username, creds.password)
            session.headers['Accept'] = 'application/json'
            self._session = session
        return self._session

    @staticmethod
    def _encode_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Convert query values to the strings the server expects.

        Booleans become lowercase 'true'/'false'; None values are dropped.
        """
        encoded = {}
        for key, value in (params or {}).items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            encoded[key] = value
        return encoded

    def query(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue an authenticated GET request and decode the JSON response.

        Args:
            path: Request path starting with '/'
            params: Query parameters

        Returns:
            Decoded JSON response

        Raises:
            APIUnreachableError: On connection failures and timeouts
            InvalidCredentialsError: On HTTP 401
            DocumentNotFoundError: On HTTP 404
            APIAccessError: On any other non-2xx status or transport failure
            MalformedResponseError: If the body is not valid JSON
        """
        session = self._get_session()
        creds = self._authenticator.get_credentials()
        url = f"{creds.base_url}{path}"
        query = self._encode_params(params)
        logger.debug(f"GET {path} params={query}")

        try:
            response = session.get(url, params=query, timeout=REQUEST_TIMEOUT)
        except (Timeout, ConnectionError):
            raise APIUnreachableError(endpoint=creds.base_url)
        except RequestException as e:
            logger.debug(f"Request to {path} failed: {e}")
            raise APIAccessError(path)

        status_code = response.status_code
        if status_code == 401:
            raise InvalidCredentialsError(user=creds.username, endpoint=creds.base_url)
        if status_code == 404:
            raise DocumentNotFoundError(doc_id=path.lstrip('/') or path)
        if not 200 <= status_code < 300:
            raise APIAccessError(path, status_code)

        try:
            return response.json()
        except ValueError:
            raise MalformedResponseError(path)

    def ping(self) -> Dict[str, Any]:
        """Check that the server is reachable."""
        return self.query('/')

    def get_latest_seq(self) -> Any:
        """Get the newest sequence number of the change feed."""
        res = self.query('/_changes', {
            'include_docs': False,
            'descending': True,
            'limit': 1,
        })
        return res.get('last_seq')

    def get_changes(self, since: Any) -> ChangesResult:
        """Get all changes after the given sequence number, with documents."""
        res = self.query('/_changes', {
            'since': since,
            'include_docs': True,
        })
        return ChangesResult.from_dict(res)

    def get_notes(self, book_id: str) -> List[Note]:
        """Get the notes of a notebook, most recently updated first."""
        res = self.query('/notes', {
            'keyword': f"bookId:{book_id}",
            'sort': 'updatedAt',
            'descending': True,
        })
        return [Note.from_dict(doc) for doc in res]

    def get_note(self, note_id: str) -> Note:
        """Get a single note by identifier."""
        return Note.from_dict(self.query(f"/{quote(note_id, safe=':')}"))

    def get_file(self, file_id: str) -> NoteFile:
        """Get an attachment including its binary payload.

        Raises:
            AttachmentError: If the payload cannot be decoded
        """
        doc = self.query(f"/{quote(file_id, safe=':')}", {'attachments': True})
        return NoteFile.from_dict(doc)

    def get_tags(self) -> List[Tag]:
        """Get all tags."""
        return [Tag.from_dict(doc) for doc in self.query('/tags')]
