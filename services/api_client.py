"""Thin HTTP client for the file analysis service."""

from __future__ import annotations

import json
import mimetypes
from contextlib import ExitStack
from typing import Any, Dict, List, Tuple
from urllib.parse import quote

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.config import ConnectionOptions
from core.models import DOWNLOAD_PATH, DownloadError, HttpError, SchemaError, TransportError
from core.session import UploadRequest
from services.logger import get_logger


logger = get_logger("api_client")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _guess_content_type(file_name: str) -> str:
    content_type, _ = mimetypes.guess_type(file_name)
    return content_type or DEFAULT_CONTENT_TYPE


class FileAnalyzerApiClient:
    """HTTP client wrapper for the upload, analyze, and download endpoints."""

    def __init__(self, options: ConnectionOptions | None = None, api_token: str = "") -> None:
        """Configure a session against the service described by ``options``."""
        self._options = options or ConnectionOptions()
        self._base_url = self._options.base_url
        self._timeout = self._options.timeout
        self._session = self._build_session(self._options.download_retries)
        self._headers: Dict[str, str] = {}
        if api_token:
            self._headers["Authorization"] = f"Bearer {api_token}"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_session(self, download_retries: int) -> Session:
        """Return a session that only retries idempotent archive downloads."""
        session = requests.Session()
        retry = Retry(
            total=download_retries,
            connect=0,
            read=0,
            status=download_retries,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _error_message(self, response: requests.Response, default: str) -> Tuple[str, Any]:
        """Extract the backend's error text, falling back to the raw body."""
        try:
            payload = response.json()
        except ValueError:
            return (response.text or default), None
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error") or default
            return str(message), payload
        return default, payload

    def _handle_response(self, response: requests.Response) -> Any:
        """Decode JSON responses and raise descriptive errors when necessary."""
        if response.ok:
            try:
                return response.json()
            except (json.JSONDecodeError, ValueError) as err:
                raise SchemaError("Analysis response is not valid JSON") from err
        message, payload = self._error_message(response, "Analysis request failed")
        raise HttpError(response.status_code, message, payload)

    def post_files(self, request: UploadRequest) -> Any:
        """Send the selected files as multipart form data and return the decoded body."""
        url = self._url(request.endpoint)
        logger.info("Uploading %d file(s) to %s", len(request.files), request.endpoint)
        with ExitStack() as stack:
            parts: List[Tuple[str, Tuple[str, Any, str]]] = [
                (
                    request.field_name,
                    (item.name, stack.enter_context(item.open()), _guess_content_type(item.name)),
                )
                for item in request.files
            ]
            try:
                response = self._session.post(
                    url,
                    headers={**self._headers, "Accept": "application/json"},
                    files=parts,
                    timeout=self._timeout,
                )
            except requests.RequestException as err:
                raise TransportError(f"Could not reach {self._base_url}: {err}") from err
        return self._handle_response(response)

    def download_archive(self, archive_file_name: str) -> bytes:
        """Fetch the archive bytes the backend produced for an analysis."""
        path = DOWNLOAD_PATH.format(archive_file_name=quote(archive_file_name, safe=""))
        logger.info("Downloading archive %s", archive_file_name)
        try:
            response = self._session.get(
                self._url(path),
                headers=self._headers,
                timeout=self._timeout,
                stream=True,
            )
        except requests.RequestException as err:
            raise TransportError(f"Could not reach {self._base_url}: {err}") from err

        if not response.ok:
            message, payload = self._error_message(response, "Failed to download archive")
            raise DownloadError(response.status_code, message, payload)

        content = bytearray()
        try:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    content.extend(chunk)
        except requests.RequestException as err:
            raise TransportError(f"Archive download interrupted: {err}") from err
        return bytes(content)
