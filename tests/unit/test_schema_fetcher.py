import httpx

from docextract.notion.schema_fetcher import NotionSchemaFetcher

DATABASE_ID = "1a2b3c4d1a2b1a2b1a2b1a2b3c4d5e6f"


def _make_fetcher(handler) -> NotionSchemaFetcher:
    return NotionSchemaFetcher(
        base_url="https://api.notion.test/v1",
        api_version="2022-06-28",
        transport=httpx.MockTransport(handler),
    )


class TestFetchPropertyNames:
    def test_returns_property_names_in_order(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"properties": {"Name": {}, "Due Date": {}, "Status": {}}},
            )

        fetcher = _make_fetcher(handler)

        assert fetcher.fetch_property_names(DATABASE_ID, "secret_token") == [
            "Name",
            "Due Date",
            "Status",
        ]
        request = seen[0]
        assert request.url.path == f"/v1/databases/{DATABASE_ID}"
        assert request.headers["Authorization"] == "Bearer secret_token"
        assert request.headers["Notion-Version"] == "2022-06-28"

    def test_non_2xx_returns_none(self) -> None:
        fetcher = _make_fetcher(lambda _request: httpx.Response(404, json={"message": "nope"}))

        assert fetcher.fetch_property_names(DATABASE_ID, "t") is None

    def test_network_error_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        assert _make_fetcher(handler).fetch_property_names(DATABASE_ID, "t") is None

    def test_malformed_json_returns_none(self) -> None:
        fetcher = _make_fetcher(lambda _request: httpx.Response(200, content=b"<html>"))

        assert fetcher.fetch_property_names(DATABASE_ID, "t") is None

    def test_missing_properties_returns_none(self) -> None:
        fetcher = _make_fetcher(lambda _request: httpx.Response(200, json={"object": "database"}))

        assert fetcher.fetch_property_names(DATABASE_ID, "t") is None
