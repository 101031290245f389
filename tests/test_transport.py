"""
Tests for proxy_key_client.core.transport module.
"""

import ssl

import httpx
import pytest

from proxy_key_client.core.exceptions import FingerprintMismatch, NoResponseError
from proxy_key_client.core.transport import (
    FingerprintVerifier,
    PinnedTransport,
    VerifyingBackend,
    build_ssl_context,
    certificate_fingerprint,
)

from .conftest import (
    OTHER_CERT,
    SERVER_CERT,
    SERVER_FINGERPRINT,
    FakeBackend,
    FakeSSLObject,
    http_response,
)

URL = "https://mgmt.example.test:8443/secret/access-keys/"


async def fetch(transport: PinnedTransport, url: str = URL) -> httpx.Response:
    async with httpx.AsyncClient(transport=transport) as client:
        return await client.get(url)


class TestFingerprintVerifier:
    """Tests for the post-handshake fingerprint check."""

    def test_matching_certificate_passes(self):
        FingerprintVerifier(SERVER_FINGERPRINT).verify("host", FakeSSLObject(SERVER_CERT))

    def test_comparison_ignores_case(self):
        FingerprintVerifier(SERVER_FINGERPRINT.upper()).verify("host", FakeSSLObject(SERVER_CERT))

    def test_different_certificate_is_rejected(self):
        with pytest.raises(FingerprintMismatch) as exc_info:
            FingerprintVerifier(SERVER_FINGERPRINT).verify("host", FakeSSLObject(OTHER_CERT))

        assert exc_info.value.actual == certificate_fingerprint(OTHER_CERT)
        assert exc_info.value.expected == SERVER_FINGERPRINT
        assert exc_info.value.host == "host"

    def test_missing_certificate_is_rejected(self):
        with pytest.raises(FingerprintMismatch) as exc_info:
            FingerprintVerifier(SERVER_FINGERPRINT).verify("host", FakeSSLObject(None))
        assert exc_info.value.actual is None

    def test_missing_ssl_object_is_rejected(self):
        with pytest.raises(FingerprintMismatch):
            FingerprintVerifier(SERVER_FINGERPRINT).verify("host", None)

    def test_mismatch_is_a_no_response_error(self):
        assert issubclass(FingerprintMismatch, NoResponseError)


class TestSSLContext:
    """Tests for TLS context construction."""

    def test_pinned_context_skips_chain_validation(self):
        context = build_ssl_context(SERVER_FINGERPRINT)
        assert context.check_hostname is False
        assert context.verify_mode == ssl.CERT_NONE

    def test_unpinned_context_validates_chain(self):
        context = build_ssl_context(None)
        assert context.check_hostname is True
        assert context.verify_mode == ssl.CERT_REQUIRED


class TestPinnedTransport:
    """End-to-end tests through httpcore with a fake network backend."""

    def test_pool_opens_sockets_through_verifying_backend(self):
        backend = FakeBackend([SERVER_CERT], http_response(204))
        transport = PinnedTransport(SERVER_FINGERPRINT, network_backend=backend)

        assert isinstance(transport._pool._network_backend, VerifyingBackend)

    def test_unpinned_pool_uses_given_backend(self):
        backend = FakeBackend([SERVER_CERT], http_response(204))
        transport = PinnedTransport(None, network_backend=backend)

        assert transport._pool._network_backend is backend

    @pytest.mark.asyncio
    async def test_matching_pin_completes_request(self):
        backend = FakeBackend([SERVER_CERT], http_response(200, {"accessKeys": []}))
        transport = PinnedTransport(SERVER_FINGERPRINT.upper(), network_backend=backend)

        response = await fetch(transport)

        assert response.status_code == 200
        assert response.json() == {"accessKeys": []}
        assert backend.streams[0].written

    @pytest.mark.asyncio
    async def test_mismatch_aborts_before_request_is_sent(self):
        backend = FakeBackend([OTHER_CERT], http_response(200, {"accessKeys": []}))
        transport = PinnedTransport(SERVER_FINGERPRINT, network_backend=backend)

        with pytest.raises(FingerprintMismatch):
            await fetch(transport)

        stream = backend.streams[0]
        assert stream.written == []
        assert stream.closed is True

    @pytest.mark.asyncio
    async def test_server_without_certificate_is_rejected(self):
        backend = FakeBackend([None], http_response(200, {}))
        transport = PinnedTransport(SERVER_FINGERPRINT, network_backend=backend)

        with pytest.raises(FingerprintMismatch):
            await fetch(transport)

    @pytest.mark.asyncio
    async def test_every_new_connection_is_verified(self):
        # The server closes after each response, so the second request
        # needs a new connection, which presents a rotated certificate.
        backend = FakeBackend([SERVER_CERT, OTHER_CERT], http_response(200, {}, close=True))
        transport = PinnedTransport(SERVER_FINGERPRINT, network_backend=backend)

        async with httpx.AsyncClient(transport=transport) as client:
            first = await client.get(URL)
            assert first.status_code == 200

            with pytest.raises(FingerprintMismatch):
                await client.get(URL)

        assert len(backend.streams) == 2
        assert backend.streams[1].written == []

    @pytest.mark.asyncio
    async def test_no_pin_accepts_any_certificate(self):
        backend = FakeBackend([OTHER_CERT], http_response(204))
        transport = PinnedTransport(None, network_backend=backend)

        response = await fetch(transport)

        assert response.status_code == 204
        assert transport.expected_fingerprint is None

    @pytest.mark.asyncio
    async def test_empty_pin_disables_pinning(self):
        backend = FakeBackend([OTHER_CERT], http_response(204))
        transport = PinnedTransport("", network_backend=backend)

        response = await fetch(transport)

        assert response.status_code == 204
