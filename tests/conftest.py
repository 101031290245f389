"""
Pytest configuration and fixtures for proxy-key-client tests.

Provides wire payloads, a routing mock transport and a fake network
backend that plays the part of a TLS server.
"""

import hashlib
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpcore
import httpx
import pytest

from proxy_key_client.core.client import ApiClient

API_URL = "https://mgmt.example.test:8443/Xk2jS8Lp"
API_PREFIX = "/Xk2jS8Lp"

SERVER_CERT = b"0\x82\x01\nfake-der-encoded-server-certificate"
OTHER_CERT = b"0\x82\x01\nsome-other-certificate"
SERVER_FINGERPRINT = hashlib.sha256(SERVER_CERT).hexdigest()


def key_entry(key_id: str, name: str = "", **extra) -> Dict[str, Any]:
    """Build an access key as the management API returns it."""
    entry = {
        "id": key_id,
        "name": name,
        "password": f"secret-{key_id}",
        "port": 12345,
        "method": "chacha20-ietf-poly1305",
        "accessUrl": f"ss://Y2hhY2hhMjA@mgmt.example.test:12345/?outline=1#{key_id}",
    }
    entry.update(extra)
    return entry


Handler = Callable[[httpx.Request], Any]


class Router:
    """Dispatches mock requests by method and path, recording each one."""
    
    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []
    
    def add(self, method: str, path: str, handler: Handler):
        self.routes[(method, API_PREFIX + path)] = handler
    
    def respond(self, method: str, path: str, status: int, body: Any = None):
        def handler(request):
            if body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=body)
        self.add(method, path, handler)
    
    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "no route"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


@pytest.fixture
def router():
    """Create an empty request router."""
    return Router()


@pytest.fixture
async def api(router):
    """ApiClient wired to the router through httpx.MockTransport."""
    client = ApiClient(API_URL, transport=httpx.MockTransport(router))
    yield client
    await client.close()


class FakeSSLObject:
    """Stands in for ssl.SSLObject after a handshake."""
    
    def __init__(self, der: Optional[bytes]):
        self._der = der
    
    def getpeercert(self, binary_form: bool = False):
        if binary_form:
            return self._der
        return {}
    
    def selected_alpn_protocol(self):
        return "http/1.1"


class FakeStream(httpcore.AsyncNetworkStream):
    """Network stream that replays a canned HTTP response."""
    
    def __init__(self, der: Optional[bytes], response: bytes):
        self.der = der
        self.tls = False
        self.closed = False
        self.written: List[bytes] = []
        self._buffer = [response]
    
    async def read(self, max_bytes: int, timeout: Optional[float] = None) -> bytes:
        return self._buffer.pop(0) if self._buffer else b""
    
    async def write(self, buffer: bytes, timeout: Optional[float] = None) -> None:
        self.written.append(buffer)
    
    async def aclose(self) -> None:
        self.closed = True
    
    async def start_tls(self, ssl_context, server_hostname=None, timeout=None):
        self.tls = True
        return self
    
    def get_extra_info(self, info: str):
        if info == "ssl_object" and self.tls:
            return FakeSSLObject(self.der)
        return None


class FakeBackend(httpcore.AsyncNetworkBackend):
    """Network backend handing out one FakeStream per connection.
    
    ``certs`` lists the certificate presented on each successive
    connection; the last one repeats.
    """
    
    def __init__(self, certs: List[Optional[bytes]], response: bytes):
        self.certs = certs
        self.response = response
        self.streams: List[FakeStream] = []
    
    async def connect_tcp(self, host, port, timeout=None, local_address=None, socket_options=None):
        der = self.certs[min(len(self.streams), len(self.certs) - 1)]
        stream = FakeStream(der, self.response)
        self.streams.append(stream)
        return stream
    
    async def connect_unix_socket(self, path, timeout=None, socket_options=None):
        raise NotImplementedError
    
    async def sleep(self, seconds: float) -> None:
        pass


def http_response(status: int, body: Any = None, close: bool = False) -> bytes:
    """Serialize a raw HTTP/1.1 response."""
    reasons = {200: "OK", 201: "Created", 204: "No Content"}
    payload = json.dumps(body).encode() if body is not None else b""
    lines = [
        f"HTTP/1.1 {status} {reasons.get(status, 'Status')}",
        f"Content-Length: {len(payload)}",
    ]
    if body is not None:
        lines.append("Content-Type: application/json")
    if close:
        lines.append("Connection: close")
    return ("\r\n".join(lines) + "\r\n\r\n").encode() + payload
