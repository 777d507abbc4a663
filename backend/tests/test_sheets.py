"""
Unit tests for the gviz spreadsheet transport.

Responses are served by httpx.MockTransport, so no network access is needed.
"""
import json

import httpx
import pytest

from career_quiz.errors import RemoteDataError, TransportError
from career_quiz.sheets import SheetsClient, rows_from_table, unwrap_gviz


def _gviz(payload) -> str:
    return "/*O_o*/\ngoogle.visualization.Query.setResponse(" + json.dumps(payload) + ");"


def _table(labels, rows):
    return {
        "version": "0.6",
        "status": "ok",
        "table": {
            "cols": [{"id": chr(65 + i), "label": label, "type": "string"} for i, label in enumerate(labels)],
            "rows": [{"c": [None if v is None else {"v": v} for v in row]} for row in rows],
        },
    }


def _client(handler) -> SheetsClient:
    return SheetsClient("sheet-123", base_url="https://sheets.test/d", transport=httpx.MockTransport(handler))


class TestUnwrap:
    def test_extracts_payload(self):
        assert unwrap_gviz(_gviz({"a": 1})) == '{"a": 1}'

    def test_returns_none_without_envelope(self):
        assert unwrap_gviz("<html>nope</html>") is None


class TestFetchTable:
    """Tests for SheetsClient.fetch_table."""

    @pytest.mark.asyncio
    async def test_returns_rows_keyed_by_trimmed_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            body = _table([" question_id ", "order", ""], [["q1", 1, "ignored"], ["q2", 2, None]])
            return httpx.Response(200, text=_gviz(body))

        async with _client(handler) as client:
            rows = await client.fetch_table("Questions")

        assert rows == [{"question_id": "q1", "order": 1}, {"question_id": "q2", "order": 2}]
        assert seen["url"].path == "/d/sheet-123/gviz/tq"
        assert seen["url"].params["sheet"] == "Questions"
        assert seen["url"].params["tqx"] == "out:json"
        assert seen["url"].params["headers"] == "1"
        assert seen["url"].params["t"].isdigit()

    @pytest.mark.asyncio
    async def test_error_body_on_4xx_is_still_parsed(self):
        payload = {"status": "error", "errors": [{"reason": "invalid_query", "detailed_message": "Invalid sheet name: Optons"}]}

        async with _client(lambda r: httpx.Response(400, text=_gviz(payload))) as client:
            with pytest.raises(RemoteDataError) as exc:
                await client.fetch_table("Optons")

        assert exc.value.reason == RemoteDataError.SHEET_NOT_FOUND
        assert exc.value.table == "Optons"

    @pytest.mark.asyncio
    async def test_other_remote_error_keeps_detail(self):
        payload = {"status": "error", "errors": [{"detailed_message": "Quota exceeded"}]}

        async with _client(lambda r: httpx.Response(200, text=_gviz(payload))) as client:
            with pytest.raises(RemoteDataError) as exc:
                await client.fetch_table("Jobs")

        assert exc.value.reason == RemoteDataError.REMOTE_ERROR
        assert exc.value.detail == "Quota exceeded"

    @pytest.mark.asyncio
    async def test_access_denied_without_envelope(self):
        async with _client(lambda r: httpx.Response(401, text="<html>access_denied</html>")) as client:
            with pytest.raises(RemoteDataError) as exc:
                await client.fetch_table("Jobs")

        assert exc.value.reason == RemoteDataError.ACCESS_DENIED

    @pytest.mark.asyncio
    async def test_invalid_sheet_name_without_envelope(self):
        async with _client(lambda r: httpx.Response(400, text="Invalid Sheet Name")) as client:
            with pytest.raises(RemoteDataError) as exc:
                await client.fetch_table("Jobz")

        assert exc.value.reason == RemoteDataError.SHEET_NOT_FOUND

    @pytest.mark.asyncio
    async def test_garbage_response_is_transport_error(self):
        async with _client(lambda r: httpx.Response(200, text="<html>login</html>")) as client:
            with pytest.raises(TransportError) as exc:
                await client.fetch_table("Jobs")

        assert exc.value.table == "Jobs"

    @pytest.mark.asyncio
    async def test_unparseable_json_is_transport_error(self):
        text = "google.visualization.Query.setResponse({not json});"
        async with _client(lambda r: httpx.Response(200, text=text)) as client:
            with pytest.raises(TransportError):
                await client.fetch_table("Jobs")

    @pytest.mark.asyncio
    async def test_network_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError) as exc:
                await client.fetch_table("Options")

        assert "connection refused" in exc.value.detail

    @pytest.mark.asyncio
    async def test_empty_sheet_yields_no_rows(self):
        payload = {"status": "ok", "table": {"cols": [], "rows": []}}
        async with _client(lambda r: httpx.Response(200, text=_gviz(payload))) as client:
            assert await client.fetch_table("Jobs") == []

    @pytest.mark.asyncio
    async def test_non_object_error_entry_is_remote_error(self):
        payload = {"status": "error", "errors": ["oops"]}
        async with _client(lambda r: httpx.Response(200, text=_gviz(payload))) as client:
            with pytest.raises(RemoteDataError) as exc:
                await client.fetch_table("Questions")

        assert exc.value.reason == RemoteDataError.REMOTE_ERROR
        assert exc.value.table == "Questions"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "table",
        [
            {"cols": [{"label": "a"}], "rows": ["x"]},
            {"cols": [{"label": "a"}], "rows": [{"c": ["x"]}]},
            {"cols": ["a"], "rows": []},
            ["not", "a", "table"],
        ],
    )
    async def test_malformed_table_is_transport_error(self, table):
        payload = {"status": "ok", "table": table}
        async with _client(lambda r: httpx.Response(200, text=_gviz(payload))) as client:
            with pytest.raises(TransportError) as exc:
                await client.fetch_table("Questions")

        assert exc.value.table == "Questions"
        assert "unexpected payload shape" in exc.value.detail


class TestProbeTable:
    """Tests for SheetsClient.probe_table."""

    @pytest.mark.asyncio
    async def test_success_reports_shape(self):
        body = _table(["option_id", "job_id"], [["o1", "j1"], ["o2", "j2"], ["o3", "j1"]])
        async with _client(lambda r: httpx.Response(200, text=_gviz(body))) as client:
            probe = await client.probe_table("OptionJobMap")

        assert probe.ok is True
        assert probe.row_count == 3
        assert probe.column_count == 2
        assert probe.column_labels == ["option_id", "job_id"]

    @pytest.mark.asyncio
    async def test_failures_are_captured_not_raised(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            probe = await client.probe_table("Jobs")

        assert probe.ok is False
        assert probe.reason == "transport"

    @pytest.mark.asyncio
    async def test_remote_error_is_reported(self):
        payload = {"status": "error", "errors": [{"detailed_message": "Invalid sheet name: X"}]}
        async with _client(lambda r: httpx.Response(400, text=_gviz(payload))) as client:
            probe = await client.probe_table("X")

        assert probe.ok is False
        assert "Invalid sheet name" in probe.details

    @pytest.mark.asyncio
    async def test_malformed_columns_do_not_raise(self):
        payload = {"status": "ok", "table": {"cols": ["a", {"label": "b"}], "rows": "x"}}
        async with _client(lambda r: httpx.Response(200, text=_gviz(payload))) as client:
            shape = await client.probe_table("Jobs")

        assert shape.ok is True
        assert shape.column_labels == ["", "b"]
        assert shape.row_count == 0


def test_rows_from_table_handles_missing_table():
    assert rows_from_table(None) == []
    assert rows_from_table({"cols": [{"label": "a"}]}) == []
