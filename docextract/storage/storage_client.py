from urllib.parse import quote

import httpx

from docextract.storage.exceptions import StorageDownloadError


class SupabaseStorageClient:
    """Downloads private objects through the Supabase Storage REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        timeout_seconds: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    def download(self, bucket: str, object_path: str) -> bytes:
        """Return the object's bytes.

        Raises:
            StorageDownloadError: on transport failure, non-2xx status, or an empty body.
        """
        try:
            response = self._client.get(f"/object/{bucket}/{quote(object_path, safe='/')}")
        except httpx.HTTPError as exc:
            raise StorageDownloadError(f"Storage request failed: {exc}") from exc

        if response.is_error:
            raise StorageDownloadError(
                f"Storage download of {bucket}/{object_path} failed "
                f"({response.status_code}): {response.text[:200]}"
            )
        if not response.content:
            raise StorageDownloadError(f"Storage returned no data for {bucket}/{object_path}")
        return response.content

    def close(self) -> None:
        self._client.close()
