import mimetypes
from dataclasses import dataclass
from urllib.parse import unquote

import httpx

from docextract.logging.logger import Log
from docextract.storage.exceptions import FileRetrievalError, StorageError
from docextract.storage.storage_client import SupabaseStorageClient

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class RetrievedFile:
    data: bytes
    mime_type: str


def extract_object_path(file_url: str, marker: str = "/documents/") -> str | None:
    """Recover the storage object path that follows ``marker`` in a storage URL."""
    if not file_url:
        return None
    index = file_url.find(marker)
    if index == -1:
        return None
    path = file_url[index + len(marker):].split("?", 1)[0]
    return unquote(path) or None


class FileRetriever:
    """Fetches a document's bytes from storage, falling back to a direct GET of its URL."""

    def __init__(
        self,
        storage_client: SupabaseStorageClient,
        *,
        bucket: str = "documents",
        path_marker: str = "/documents/",
        timeout_seconds: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._storage_client = storage_client
        self._bucket = bucket
        self._path_marker = path_marker
        self._http = httpx.Client(timeout=timeout_seconds, transport=transport, follow_redirects=True)

    def retrieve(self, file_url: str, declared_mime_type: str = "") -> RetrievedFile:
        """Return the file's bytes and a best-guess MIME type.

        Raises:
            FileRetrievalError: if both the storage download and the direct fetch fail.
        """
        object_path = extract_object_path(file_url, self._path_marker)
        try:
            if object_path is None:
                raise StorageError(f"Could not determine storage object path from {file_url}")
            data = self._storage_client.download(self._bucket, object_path)
            Log.info(f"Downloaded {len(data)} bytes from storage path {object_path}")
            return RetrievedFile(data, self._guess_mime_type(declared_mime_type, None, object_path))
        except StorageError as exc:
            Log.warning(f"Storage download failed; falling back to direct fetch of file_url: {exc}")

        return self._fetch_direct(file_url, declared_mime_type)

    def _fetch_direct(self, file_url: str, declared_mime_type: str) -> RetrievedFile:
        try:
            response = self._http.get(file_url)
        except httpx.HTTPError as exc:
            raise FileRetrievalError(f"Failed to fetch file_url: {exc}") from exc

        if response.is_error:
            raise FileRetrievalError(
                f"Failed to fetch file_url ({response.status_code}): {response.text[:200]}"
            )
        Log.info(f"Fetched {len(response.content)} bytes directly from file_url")
        return RetrievedFile(
            response.content,
            self._guess_mime_type(
                declared_mime_type,
                response.headers.get("content-type"),
                file_url,
            ),
        )

    @staticmethod
    def _guess_mime_type(declared: str, content_type: str | None, path: str) -> str:
        if declared:
            return declared.strip().lower()
        if content_type:
            return content_type.split(";", 1)[0].strip().lower()
        guessed, _encoding = mimetypes.guess_type(path)
        return guessed or DEFAULT_MIME_TYPE

    def close(self) -> None:
        self._http.close()
