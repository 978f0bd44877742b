"""Tests for upload forwarder module."""

import pytest
import httpx

from src.folderwatch.exceptions import ForwardError
from src.folderwatch.forwarder import UploadForwarder, HttpUploadForwarder


def make_forwarder(handler, url="http://ingest.test/uploads"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpUploadForwarder(url, client=client), client


class TestUploadForwarder:
    """Tests for the UploadForwarder base class."""

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            UploadForwarder()

    def test_subclass_close_is_optional(self):
        class Sink(UploadForwarder):
            def create(self, content, content_type, filename=None):
                return len(content)

        sink = Sink()
        assert sink.create(b"abc", "application/pdf") == 3
        sink.close()


class TestHttpUploadForwarder:
    """Tests for HttpUploadForwarder class."""

    def test_posts_raw_content(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"id": "upload-1"})

        forwarder, client = make_forwarder(handler)
        result = forwarder.create(b"%PDF-1.7 body", "application/pdf", filename="new.pdf")

        assert result == {"id": "upload-1"}
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "http://ingest.test/uploads"
        assert request.content == b"%PDF-1.7 body"
        assert request.headers["content-type"] == "application/pdf"
        assert request.headers["x-filename"] == "new.pdf"
        client.close()

    def test_no_filename_header_when_unknown(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        forwarder, client = make_forwarder(handler)
        result = forwarder.create(b"data", "application/pdf")

        assert result is None
        assert "x-filename" not in seen[0].headers
        client.close()

    def test_text_response(self):
        forwarder, client = make_forwarder(lambda request: httpx.Response(200, text="stored"))

        assert forwarder.create(b"data", "application/pdf") == "stored"
        client.close()

    def test_http_error_raises_forward_error(self):
        forwarder, client = make_forwarder(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(ForwardError, match="HTTP 500"):
            forwarder.create(b"data", "application/pdf", filename="bad.pdf")
        client.close()

    def test_transport_error_raises_forward_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        forwarder, client = make_forwarder(handler)

        with pytest.raises(ForwardError, match="failed"):
            forwarder.create(b"data", "application/pdf")
        client.close()

    def test_does_not_close_injected_client(self):
        forwarder, client = make_forwarder(lambda request: httpx.Response(204))
        forwarder.close()

        assert client.is_closed is False
        client.close()

    def test_owns_client_when_not_injected(self):
        with HttpUploadForwarder("http://ingest.test/uploads", timeout=1.0) as forwarder:
            assert forwarder.upload_url == "http://ingest.test/uploads"
            client = forwarder._client

        assert client.is_closed is True
