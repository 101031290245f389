"""Certificate-pinned HTTPS transport.

The management server usually runs with a self-signed certificate, so the
only trust anchor is the SHA-256 fingerprint it reports at install time.
Pinning is implemented as an httpcore network backend that wraps every
stream it opens: once ``start_tls`` has completed, the peer certificate is
checked before httpcore is handed the stream, so no request bytes are ever
written to an unverified server. Pooled connections are verified once, when
they are established; each new connection gets its own check.
"""

import hashlib
import ssl
from typing import Any, Iterable, Optional, Protocol

import httpcore
import httpx

from .exceptions import FingerprintMismatch
from .logging import get_logger

logger = get_logger('transport')


def certificate_fingerprint(der: bytes) -> str:
    """Return the lowercase hex SHA-256 digest of a DER certificate."""
    return hashlib.sha256(der).hexdigest()


class PeerVerifier(Protocol):
    """Something that can accept or reject a freshly negotiated TLS peer."""
    
    def verify(self, host: str, ssl_object: Any) -> None:
        """Raise if the peer behind ``ssl_object`` must not be trusted."""
        ...


class FingerprintVerifier:
    """Accepts a peer only if its leaf certificate matches a fingerprint."""
    
    def __init__(self, expected_fingerprint: str):
        """Initialize verifier.
        
        Args:
            expected_fingerprint: Hex SHA-256 of the server certificate, any case
        """
        self.expected_fingerprint = expected_fingerprint
    
    def verify(self, host: str, ssl_object: Any) -> None:
        """Compare the peer certificate against the pinned fingerprint.
        
        Args:
            host: Server hostname, for diagnostics
            ssl_object: Negotiated ``ssl.SSLObject`` (or None)
        
        Raises:
            FingerprintMismatch: If no certificate was presented or it differs
        """
        der = ssl_object.getpeercert(binary_form=True) if ssl_object is not None else None
        actual = certificate_fingerprint(der) if der else None
        
        if actual is None or actual.lower() != self.expected_fingerprint.lower():
            logger.warning(f"Certificate fingerprint mismatch for {host}: got {actual}")
            raise FingerprintMismatch(host, self.expected_fingerprint, actual)
        
        logger.trace(f"Certificate fingerprint verified for {host}")


class VerifyingStream(httpcore.AsyncNetworkStream):
    """Network stream that runs a peer verifier right after the TLS handshake."""
    
    def __init__(self, stream: httpcore.AsyncNetworkStream, host: str, verifier: PeerVerifier):
        self._stream = stream
        self._host = host
        self._verifier = verifier
    
    async def read(self, max_bytes: int, timeout: Optional[float] = None) -> bytes:
        return await self._stream.read(max_bytes, timeout=timeout)
    
    async def write(self, buffer: bytes, timeout: Optional[float] = None) -> None:
        await self._stream.write(buffer, timeout=timeout)
    
    async def aclose(self) -> None:
        await self._stream.aclose()
    
    async def start_tls(
        self,
        ssl_context: ssl.SSLContext,
        server_hostname: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> httpcore.AsyncNetworkStream:
        tls_stream = await self._stream.start_tls(
            ssl_context, server_hostname=server_hostname, timeout=timeout
        )
        try:
            self._verifier.verify(server_hostname or self._host, tls_stream.get_extra_info('ssl_object'))
        except BaseException:
            await tls_stream.aclose()
            raise
        return tls_stream
    
    def get_extra_info(self, info: str) -> Any:
        return self._stream.get_extra_info(info)


class VerifyingBackend(httpcore.AsyncNetworkBackend):
    """Network backend whose TCP streams verify their TLS peer."""
    
    def __init__(self, verifier: PeerVerifier, backend: Optional[httpcore.AsyncNetworkBackend] = None):
        """Initialize backend.
        
        Args:
            verifier: Check applied after every TLS handshake
            backend: Backend that opens the real sockets (anyio by default)
        """
        self._verifier = verifier
        self._backend = backend or httpcore.AnyIOBackend()
    
    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        local_address: Optional[str] = None,
        socket_options: Optional[Iterable[Any]] = None,
    ) -> httpcore.AsyncNetworkStream:
        logger.trace(f"Opening connection to {host}:{port}")
        stream = await self._backend.connect_tcp(
            host,
            port,
            timeout=timeout,
            local_address=local_address,
            socket_options=socket_options,
        )
        return VerifyingStream(stream, host, self._verifier)
    
    async def connect_unix_socket(
        self,
        path: str,
        timeout: Optional[float] = None,
        socket_options: Optional[Iterable[Any]] = None,
    ) -> httpcore.AsyncNetworkStream:
        return await self._backend.connect_unix_socket(
            path, timeout=timeout, socket_options=socket_options
        )
    
    async def sleep(self, seconds: float) -> None:
        await self._backend.sleep(seconds)


def build_ssl_context(expected_fingerprint: Optional[str] = None) -> ssl.SSLContext:
    """Create the TLS context for the management API.
    
    With a pinned fingerprint the certificate is typically self-signed, so
    chain and hostname validation are turned off and the pin alone decides
    trust. Without one, standard CA validation applies.
    """
    context = httpx.create_ssl_context()
    if expected_fingerprint:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class PinnedTransport(httpx.AsyncHTTPTransport):
    """httpx transport that pins the server certificate on every new connection.
    
    Without ``expected_fingerprint`` this behaves like a plain
    ``httpx.AsyncHTTPTransport`` with standard certificate validation.
    """
    
    def __init__(
        self,
        expected_fingerprint: Optional[str] = None,
        limits: httpx.Limits = httpx.Limits(max_connections=10, max_keepalive_connections=5),
        network_backend: Optional[httpcore.AsyncNetworkBackend] = None,
    ):
        """Initialize transport.
        
        Args:
            expected_fingerprint: Hex SHA-256 of the server certificate; None or empty disables pinning
            limits: Connection pool limits
            network_backend: Backend that opens sockets (anyio by default)
        """
        ssl_context = build_ssl_context(expected_fingerprint)
        
        self.expected_fingerprint = expected_fingerprint or None
        if self.expected_fingerprint:
            network_backend = VerifyingBackend(
                FingerprintVerifier(self.expected_fingerprint), network_backend
            )
        
        # The base initializer only builds this pool; build it once, opening
        # sockets through our backend
        self._pool = httpcore.AsyncConnectionPool(
            ssl_context=ssl_context,
            max_connections=limits.max_connections,
            max_keepalive_connections=limits.max_keepalive_connections,
            keepalive_expiry=limits.keepalive_expiry,
            http1=True,
            http2=False,
            retries=0,
            network_backend=network_backend,
        )
