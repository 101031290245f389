"""Async client for the proxy management API's access-key endpoints."""

import asyncio
from dataclasses import replace
from typing import Any, Awaitable, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import Config
from .exceptions import ConfigurationError, ProxyKeyClientError, ValidationError
from .logging import get_logger
from .models import KeyRecord
from .normalize import acknowledged, expect_status, json_body, normalize_failures, require_field
from .transport import PinnedTransport

logger = get_logger('client')

USER_AGENT = 'proxy-key-client/0.1.0'


async def join_all(*aws: Awaitable[Any]) -> List[Any]:
    """Run awaitables concurrently and succeed only if all of them do.
    
    As soon as one fails the others are cancelled and awaited, then the
    failure is raised. When several have failed by that point, the first
    in argument order wins.
    
    Args:
        *aws: Awaitables to run
    
    Returns:
        Their results, in argument order
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
    
    for task in tasks:
        if task in done and task.exception() is not None:
            raise task.exception()
    return [task.result() for task in tasks]


class ApiClient:
    """Client for listing, creating, renaming and capping access keys.
    
    Every operation makes a single attempt; nothing is retried. Failures
    surface as ``HttpError``, ``NoResponseError`` (including
    ``FingerprintMismatch``) or ``ServerError``, never as httpx exceptions.
    
    Example:
        async with ApiClient(url, cert_sha256=fingerprint) as api:
            for key in await api.list_keys():
                print(key.name, key.bytes_used)
    """
    
    def __init__(
        self,
        api_url: str,
        cert_sha256: Optional[str] = None,
        request_timeout: float = 30.0,
        connect_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.
        
        Args:
            api_url: Management API URL, including its secret path
            cert_sha256: Pinned SHA-256 fingerprint of the server certificate
            request_timeout: Read/write/pool timeout in seconds
            connect_timeout: Connect timeout in seconds
            transport: Transport override (defaults to a PinnedTransport)
        
        Raises:
            ConfigurationError: If the URL is malformed, not http(s), or not https while pinned
        """
        if not api_url:
            raise ConfigurationError("No management API URL configured")
        try:
            url = httpx.URL(api_url)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid management API URL: {e}") from e
        if url.scheme not in ('http', 'https') or not url.host:
            raise ConfigurationError("Management API URL must be an absolute http(s) URL")
        if cert_sha256 and url.scheme != 'https':
            raise ConfigurationError("Certificate pinning requires an https API URL")
        
        self._api_url = api_url
        self._cert_sha256 = cert_sha256 or None
        self._timeout = httpx.Timeout(request_timeout, connect=connect_timeout)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
    
    @classmethod
    def from_config(cls, config: Config) -> 'ApiClient':
        """Create a client from a Config."""
        return cls(
            config.require_api_url(),
            cert_sha256=config.cert_sha256,
            request_timeout=float(config.request_timeout),
            connect_timeout=float(config.connect_timeout),
        )
    
    @property
    def api_url(self) -> str:
        return self._api_url
    
    @property
    def cert_sha256(self) -> Optional[str]:
        return self._cert_sha256
    
    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the pooled HTTP client.
        
        Returns:
            Configured async HTTP client
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._api_url,
                headers={
                    'User-Agent': USER_AGENT,
                    'Accept': 'application/json',
                },
                timeout=self._timeout,
                transport=self._transport or PinnedTransport(self._cert_sha256),
                follow_redirects=False,
            )
        return self._client
    
    async def __aenter__(self):
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
    
    async def close(self):
        """Close the HTTP client and its pooled connections."""
        if self._client:
            await self._client.aclose()
            self._client = None
    
    # Remote operations
    
    async def list_keys(self) -> List[KeyRecord]:
        """List all access keys with their transfer usage.
        
        The key list and the transfer metrics are fetched concurrently and
        merged by key id. Keys without metrics report 0 bytes used.
        
        Returns:
            Key records in server order
        """
        entries, transfer = await join_all(self._fetch_key_entries(), self._fetch_transfer())
        
        records = []
        for entry in entries:
            record = KeyRecord.from_wire(entry)
            records.append(replace(record, bytes_used=transfer.get(record.id, 0)))
        
        logger.debug(f"Listed {len(records)} access keys")
        return records
    
    async def _fetch_key_entries(self) -> List[Any]:
        operation = 'list keys'
        with normalize_failures(operation):
            response = await self.client.get('/access-keys/')
        expect_status(response, 200, operation)
        return require_field(json_body(response, operation), 'accessKeys', list, operation)
    
    async def _fetch_transfer(self) -> Dict[str, Any]:
        operation = 'list usage'
        with normalize_failures(operation):
            response = await self.client.get('/metrics/transfer')
        expect_status(response, 200, operation)
        return require_field(json_body(response, operation), 'bytesTransferredByUserId', dict, operation)
    
    async def create_key(self, name: Optional[str] = None) -> KeyRecord:
        """Create a new access key, optionally naming it.
        
        Naming is a second request. If it fails the key still exists and
        is returned with the name the server gave it.
        
        Args:
            name: Name to give the new key
        
        Returns:
            The new key, with no usage and no data limit
        """
        operation = 'create key'
        with normalize_failures(operation):
            response = await self.client.post('/access-keys/')
        expect_status(response, 201, operation)
        record = KeyRecord.from_wire(json_body(response, operation), with_limit=False)
        logger.info(f"Created access key {record.id}")
        
        if name is None:
            return record
        
        try:
            renamed = await self.rename_key(record.id, name)
        except ProxyKeyClientError as e:
            logger.warning(f"Created access key {record.id} but could not name it: {e.message}")
            return record
        
        if not renamed:
            logger.warning(f"Created access key {record.id} but the server did not accept its name")
            return record
        return replace(record, name=name)
    
    async def rename_key(self, key_id: str, name: str) -> bool:
        """Rename an access key.
        
        Args:
            key_id: Key identifier
            name: New name
        
        Returns:
            True if the server acknowledged the rename
        """
        operation = 'rename key'
        with normalize_failures(operation):
            response = await self.client.put(
                f'/access-keys/{quote(str(key_id), safe="")}/name',
                json={'name': name},
            )
        return acknowledged(response, 204, operation)
    
    async def add_data_limit(self, key_id: str, limit_bytes: int) -> bool:
        """Cap the transfer of an access key.
        
        Args:
            key_id: Key identifier
            limit_bytes: Limit in bytes, 0 or more
        
        Returns:
            True if the server acknowledged the limit
        
        Raises:
            ValidationError: If ``limit_bytes`` is not a non-negative integer
        """
        if isinstance(limit_bytes, bool) or not isinstance(limit_bytes, int) or limit_bytes < 0:
            raise ValidationError('limit_bytes', 'must be a non-negative integer', limit_bytes)
        
        operation = 'set data limit'
        with normalize_failures(operation):
            response = await self.client.put(
                f'/access-keys/{quote(str(key_id), safe="")}/data-limit',
                json={'limit': {'bytes': limit_bytes}},
            )
        return acknowledged(response, 204, operation)
