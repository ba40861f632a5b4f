import httpx

from docextract.logging.logger import Log


class NotionSchemaFetcher:
    """Reads the ordered property (column) names of a Notion database.

    Best effort: every failure is logged and reported as ``None``.
    """

    def __init__(
        self,
        *,
        base_url: str = "https://api.notion.com/v1",
        api_version: str = "2022-06-28",
        timeout_seconds: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_version = api_version
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )

    def fetch_property_names(self, database_id: str, token: str) -> list[str] | None:
        try:
            response = self._client.get(
                f"/databases/{database_id}",
                headers={
                    "Authorization": f"Bearer {token}",
                    "Notion-Version": self._api_version,
                },
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            Log.warning(
                f"Notion schema fetch for {database_id} failed with "
                f"status {exc.response.status_code}"
            )
            return None
        except httpx.HTTPError as exc:
            Log.warning(f"Notion schema fetch for {database_id} failed: {exc}")
            return None
        except ValueError as exc:
            Log.warning(f"Notion schema response for {database_id} is not JSON: {exc}")
            return None

        properties = payload.get("properties") if isinstance(payload, dict) else None
        if not isinstance(properties, dict) or not properties:
            Log.warning(f"Notion schema response for {database_id} has no properties")
            return None

        names = [str(name) for name in properties]
        Log.info(f"Fetched {len(names)} Notion properties for database {database_id}")
        return names

    def close(self) -> None:
        self._client.close()
