"""
HTTP fetcher for asset resolution.

Uses aiohttp with separate credentialed and anonymous sessions, so that
same-origin loads send cookies and cross-origin loads do not.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..core.errors import NetworkFailure
from ..utils.constants import DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.log import get_logger


@dataclass
class FetchedAsset:
    """A fetched response body with the metadata the resolvers need."""

    url: str
    status: int
    content_type: str
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")


class AssetFetcher:
    """
    Fetches asset bytes over HTTP.
    
    Sessions are created lazily and released by close() or by leaving the
    async context manager.
    """
    
    def __init__(
        self,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        cookies: Optional[Mapping[str, str]] = None
    ):
        """
        Initialize the asset fetcher.
        
        Args:
            timeout: Total request timeout in seconds
            user_agent: User agent string for requests
            cookies: Cookies sent with credentialed requests
        """
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.cookies = dict(cookies or {})
        self.logger = get_logger("fetch")
        self._sessions: Dict[bool, aiohttp.ClientSession] = {}
    
    def _session(self, credentials: bool) -> aiohttp.ClientSession:
        session = self._sessions.get(credentials)
        if session is None or session.closed:
            session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                cookies=self.cookies if credentials else None,
                cookie_jar=None if credentials else aiohttp.DummyCookieJar(),
            )
            self._sessions[credentials] = session
        return session
    
    async def fetch(self, url: str, credentials: bool = False) -> FetchedAsset:
        """
        Fetch a URL.
        
        Args:
            url: Absolute URL
            credentials: Send cookies with the request
            
        Returns:
            FetchedAsset with the response body
            
        Raises:
            NetworkFailure: On client errors, timeouts or non-2xx status
        """
        session = self._session(credentials)
        try:
            async with session.get(url, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise NetworkFailure(f"HTTP {response.status} for {url}", url)
                body = await response.read()
                self.logger.debug(f"Fetched {len(body)} bytes: {url}")
                return FetchedAsset(
                    url=str(response.url),
                    status=response.status,
                    content_type=response.headers.get("Content-Type", ""),
                    body=body,
                    headers=dict(response.headers),
                )
        except ClientError as e:
            raise NetworkFailure(f"Client error fetching {url}: {e}", url) from e
        except asyncio.TimeoutError as e:
            raise NetworkFailure(f"Timeout fetching {url}", url) from e
        except ValueError as e:
            raise NetworkFailure(f"Invalid URL {url}: {e}", url) from e
    
    async def close(self) -> None:
        """Close all open sessions."""
        for session in self._sessions.values():
            if not session.closed:
                await session.close()
        self._sessions.clear()
    
    async def __aenter__(self):
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
