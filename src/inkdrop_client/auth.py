"""Authentication module for loading Inkdrop local server credentials.

This module handles loading the credentials of the Inkdrop local HTTP server
from environment variables using python-dotenv. It validates that all required
credentials are present and raises appropriate errors if any are missing.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

DEFAULT_HOSTNAME = 'localhost'
DEFAULT_PORT = 19840


class Credentials(NamedTuple):
    """Inkdrop local server credentials."""
    hostname: str
    port: int
    username: str
    password: str

    @property
    def base_url(self) -> str:
        return f"http://{self.hostname}:{self.port}"


class Authenticator:
    """Supplies credentials for the Inkdrop local server.

    When explicit credentials are given they are returned as-is. Otherwise
    they are loaded from a .env file using python-dotenv and are never
    logged.

    Environment variables:
        INKDROP_HOSTNAME: Server hostname (default: localhost)
        INKDROP_PORT: Server port (default: 19840)
        INKDROP_USERNAME: Username configured in the Inkdrop local server plugin
        INKDROP_PASSWORD: Password configured in the Inkdrop local server plugin

    Raises:
        InvalidCredentialsError: If any required credential is missing

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.base_url}")
    """

    def __init__(self, credentials: Optional[Credentials] = None):
        """Initialize the authenticator.

        Args:
            credentials: Optional explicit credentials. When omitted, environment
                variables are loaded from a .env file.
        """
        self._credentials = credentials
        if credentials is None:
            load_dotenv()

    def get_credentials(self) -> Credentials:
        """Get Inkdrop credentials.

        Returns:
            Credentials: A named tuple containing hostname, port, username and password

        Raises:
            InvalidCredentialsError: If any required credential is missing or the
                port is not a number
        """
        if self._credentials is not None:
            return self._credentials

        hostname = os.getenv('INKDROP_HOSTNAME') or DEFAULT_HOSTNAME
        port_str = os.getenv('INKDROP_PORT') or str(DEFAULT_PORT)
        username = os.getenv('INKDROP_USERNAME')
        password = os.getenv('INKDROP_PASSWORD')

        endpoint = f"http://{hostname}:{port_str}"

        if not username or not password:
            raise InvalidCredentialsError(
                user=username if username else "unknown",
                endpoint=endpoint
            )

        try:
            port = int(port_str)
        except ValueError:
            raise InvalidCredentialsError(user=username, endpoint=endpoint)

        return Credentials(
            hostname=hostname,
            port=port,
            username=username,
            password=password
        )
