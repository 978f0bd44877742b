"""
Upload forwarders: the sink that receives completed files.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from .exceptions import ForwardError

logger = logging.getLogger(__name__)


class UploadForwarder(ABC):
    """Abstract base class for ingestion sinks."""

    @abstractmethod
    def create(self, content: bytes, content_type: str, filename: Optional[str] = None) -> Any:
        """
        Deliver one file's full content.
        
        Args:
            content: File bytes
            content_type: MIME type of the content
            filename: Bare filename, informational only
            
        Returns:
            Sink-specific result
            
        Raises:
            ForwardError: If the sink rejects the file or cannot be reached
        """
        pass

    def close(self) -> None:
        """Release any resources held by the forwarder."""
        pass


class HttpUploadForwarder(UploadForwarder):
    """
    Forwards files to an uploads endpoint with a raw-body POST.
    
    The body is the file content as-is; the content type travels in the
    Content-Type header and the filename, when known, in X-Filename.
    """

    def __init__(
        self,
        upload_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the forwarder.
        
        Args:
            upload_url: Endpoint receiving the POST
            timeout: Request timeout in seconds (None disables it)
            client: Pre-built httpx client, mainly for tests
        """
        self._upload_url = upload_url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def upload_url(self) -> str:
        return self._upload_url

    def create(self, content: bytes, content_type: str, filename: Optional[str] = None) -> Any:
        headers = {"Content-Type": content_type}
        if filename:
            headers["X-Filename"] = filename

        try:
            response = self._client.post(self._upload_url, content=content, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ForwardError(
                f"Upload endpoint rejected {filename or 'file'}: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ForwardError(f"Upload to {self._upload_url} failed: {e}") from e

        logger.debug(f"Upload endpoint answered {response.status_code} for {filename}")
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
