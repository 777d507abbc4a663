from __future__ import annotations
import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx

from .errors import DataLoadError, RemoteDataError, TransportError
from .models import TableProbe
from .settings import settings

logger = logging.getLogger(__name__)

_ENVELOPE = re.compile(r"google\.visualization\.Query\.setResponse\((.*)\);", re.S)


def unwrap_gviz(text: str) -> Optional[str]:
	"""Return the JSON payload inside the gviz JSONP callback, or None."""
	match = _ENVELOPE.search(text)
	return match.group(1) if match else None


def _is_invalid_sheet_name(message: str) -> bool:
	return "invalid sheet name" in message.lower()


class SheetsClient:
	"""Reads single tabs of a published Google Sheet through the gviz endpoint."""

	def __init__(
		self,
		spreadsheet_id: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.spreadsheet_id = spreadsheet_id or settings.spreadsheet_id
		self.base_url = (base_url or settings.sheets_base_url).rstrip("/")
		self._client = httpx.AsyncClient(timeout=timeout or settings.sheets_timeout_seconds, transport=transport)

	@property
	def gviz_url(self) -> str:
		return f"{self.base_url}/{self.spreadsheet_id}/gviz/tq"

	async def _get_text(self, sheet_name: str) -> str:
		# Timestamp defeats caching; gviz may also put error details in a 4xx body,
		# so the status code alone is not treated as fatal.
		params = {
			"tqx": "out:json",
			"sheet": sheet_name,
			"headers": "1",
			"t": str(int(time.time() * 1000)),
		}
		r = await self._client.get(self.gviz_url, params=params)
		return r.text

	async def _fetch_payload(self, sheet_name: str) -> Dict[str, Any]:
		try:
			text = await self._get_text(sheet_name)
		except httpx.RequestError as net_err:
			raise TransportError(sheet_name, str(net_err) or net_err.__class__.__name__) from net_err
		json_string = unwrap_gviz(text)
		if json_string is None:
			if "access_denied" in text:
				raise RemoteDataError(sheet_name, RemoteDataError.ACCESS_DENIED)
			if _is_invalid_sheet_name(text):
				raise RemoteDataError(sheet_name, RemoteDataError.SHEET_NOT_FOUND)
			raise TransportError(sheet_name, "invalid response; the sheet may not be published or the name is wrong")
		try:
			data = json.loads(json_string)
		except ValueError as parse_err:
			raise TransportError(sheet_name, f"unparseable payload ({parse_err})") from parse_err
		if not isinstance(data, dict):
			raise TransportError(sheet_name, "unexpected payload shape")
		return data

	async def fetch_table(self, sheet_name: str) -> List[Dict[str, Any]]:
		try:
			data = await self._fetch_payload(sheet_name)
			if data.get("status") == "error":
				detail = _first_error_detail(data.get("errors"))
				if _is_invalid_sheet_name(detail):
					raise RemoteDataError(sheet_name, RemoteDataError.SHEET_NOT_FOUND, detail)
				raise RemoteDataError(sheet_name, RemoteDataError.REMOTE_ERROR, detail or None)
			return rows_from_table(data.get("table"), sheet_name)
		except DataLoadError as err:
			logger.error("Error fetching or parsing sheet %r: %s", sheet_name, err)
			raise

	async def probe_table(self, sheet_name: str) -> TableProbe:
		try:
			data = await self._fetch_payload(sheet_name)
		except DataLoadError as err:
			return TableProbe(table=sheet_name, ok=False, reason=err.kind, details=str(err))
		except Exception as err:
			return TableProbe(table=sheet_name, ok=False, reason="unexpected", details=str(err))
		if data.get("status") == "error":
			return TableProbe(
				table=sheet_name,
				ok=False,
				reason="remote",
				details=json.dumps(data.get("errors")),
			)
		table = data.get("table")
		table = table if isinstance(table, dict) else {}
		cols = table.get("cols")
		cols = cols if isinstance(cols, list) else []
		rows = table.get("rows")
		rows = rows if isinstance(rows, list) else []
		return TableProbe(
			table=sheet_name,
			ok=True,
			row_count=len(rows),
			column_count=len(cols),
			column_labels=[str(c.get("label") or "") if isinstance(c, dict) else "" for c in cols],
		)

	async def aclose(self) -> None:
		await self._client.aclose()

	async def __aenter__(self) -> "SheetsClient":
		return self

	async def __aexit__(self, *exc: Any) -> None:
		await self.aclose()


def _first_error_detail(errors: Any) -> str:
	"""``detailed_message`` of the first gviz error, or "" when it has none."""
	if not isinstance(errors, list) or not errors:
		return ""
	first = errors[0]
	if not isinstance(first, dict):
		return ""
	return str(first.get("detailed_message") or "")


def rows_from_table(table: Optional[Dict[str, Any]], sheet_name: str = "") -> List[Dict[str, Any]]:
	"""Turn a gviz ``table`` object into row mappings keyed by trimmed header.

	Raises :class:`TransportError` when the table, a row or a cell is not the
	object gviz documents.
	"""
	if not table:
		return []
	if not isinstance(table, dict):
		raise TransportError(sheet_name, "unexpected payload shape")
	if not table.get("cols") or table.get("rows") is None:
		return []
	cols, raw_rows = table["cols"], table["rows"]
	if not isinstance(cols, list) or not isinstance(raw_rows, list):
		raise TransportError(sheet_name, "unexpected payload shape")
	headers: List[str] = []
	for col in cols:
		if col is not None and not isinstance(col, dict):
			raise TransportError(sheet_name, "unexpected payload shape")
		headers.append(str((col or {}).get("label") or "").strip())
	rows: List[Dict[str, Any]] = []
	for row in raw_rows:
		if row is not None and not isinstance(row, dict):
			raise TransportError(sheet_name, "unexpected payload shape")
		cells = (row or {}).get("c") or []
		if not isinstance(cells, list):
			raise TransportError(sheet_name, "unexpected payload shape")
		row_data: Dict[str, Any] = {}
		for index, cell in enumerate(cells):
			if cell is not None and not isinstance(cell, dict):
				raise TransportError(sheet_name, "unexpected payload shape")
			header = headers[index] if index < len(headers) else ""
			if header:
				row_data[header] = (cell or {}).get("v")
		rows.append(row_data)
	return rows
