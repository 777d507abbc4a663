"""
Quiz data loading
=================

Turns the four spreadsheet tabs (Questions, Options, Jobs, OptionJobMap) into
a validated :class:`QuizData`. Sheet rows are user-edited, so every column is
looked up case-insensitively and every id is trimmed before use.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from .errors import (
	DataLoadError,
	EmptyTableError,
	MissingLinkColumnError,
	MissingQuestionIdsError,
	UnlinkedQuestionsError,
)
from .models import Choice, DebugReport, Job, OptionJobMapItem, Question, QuizData, TableProbe

logger = logging.getLogger(__name__)

QUESTIONS = "Questions"
OPTIONS = "Options"
JOBS = "Jobs"
OPTION_JOB_MAP = "OptionJobMap"
SHEET_NAMES: tuple[str, ...] = (QUESTIONS, OPTIONS, JOBS, OPTION_JOB_MAP)


class TableSource(Protocol):
	async def fetch_table(self, sheet_name: str) -> List[Dict[str, Any]]: ...

	async def probe_table(self, sheet_name: str) -> TableProbe: ...


class Table:
	"""One fetched sheet with its headers normalized once at ingestion."""

	def __init__(self, name: str, raw_rows: Sequence[Mapping[str, Any]]) -> None:
		self.name = name
		# Headers as found (trimmed, original case), for diagnostics
		self.headers: List[str] = [str(k).strip() for k in raw_rows[0].keys()] if raw_rows else []
		self.rows: List[Dict[str, Any]] = []
		for raw in raw_rows:
			row: Dict[str, Any] = {}
			for k, v in raw.items():
				# First of several same-named columns wins
				row.setdefault(str(k).strip().lower(), v)
			if any(not _is_blank(v) for v in row.values()):
				self.rows.append(row)

	def __len__(self) -> int:
		return len(self.rows)


def _is_blank(value: Any) -> bool:
	return value is None or value == ""


def _render(value: Any) -> str:
	if isinstance(value, float) and value.is_integer():
		return str(int(value))
	return str(value)


def cell_text(value: Any) -> str:
	"""Render a cell as text. Whole-number floats (gviz numbers) lose their ``.0``.

	Falsy cells (blank, ``False``, zero, NaN) render as "".
	"""
	if _is_blank(value) or value is False:
		return ""
	if isinstance(value, (int, float)) and (value == 0 or value != value):
		return ""
	return _render(value)


def _field(row: Mapping[str, Any], column: str) -> str:
	return cell_text(row.get(column))


def _id(row: Mapping[str, Any], column: str) -> str:
	return _field(row, column).strip()


_MISSING = object()


def _order_key(value: Any) -> float:
	"""Numeric sort key; a blank cell counts as 0, an absent column or text as NaN."""
	if value is _MISSING:
		return math.nan
	if value is None:
		return 0.0
	if isinstance(value, bool):
		return float(value)
	if isinstance(value, str) and not value.strip():
		return 0.0
	try:
		return float(value)
	except (TypeError, ValueError):
		return math.nan


def _unique(values: Sequence[str]) -> List[str]:
	seen: Dict[str, None] = {}
	for v in values:
		if v:
			seen.setdefault(v, None)
	return list(seen)


def parse_jobs(table: Table) -> List[Job]:
	jobs: List[Job] = []
	for row in table.rows:
		job_id = _id(row, "job_id")
		if not job_id:
			continue
		jobs.append(
			Job(
				id=job_id,
				name=_field(row, "job_name"),
				cluster_code=_field(row, "cluster_code"),
				cluster_name=_field(row, "cluster_name"),
				emoji=_field(row, "emoji"),
			)
		)
	return jobs


def parse_option_job_map(table: Table) -> List[OptionJobMapItem]:
	items: List[OptionJobMapItem] = []
	for row in table.rows:
		option_id = _id(row, "option_id")
		job_id = _id(row, "job_id")
		if option_id and job_id:
			items.append(OptionJobMapItem(option_id=option_id, job_id=job_id))
	return items


def group_options(table: Table) -> Dict[str, List[Choice]]:
	"""Group choices by their linking ``question_id``, keeping sheet order."""
	by_question: Dict[str, List[Choice]] = {}
	for row in table.rows:
		question_id = _id(row, "question_id")
		if not question_id:
			continue
		choices = by_question.setdefault(question_id, [])
		option_id = _id(row, "option_id")
		if not option_id:
			continue
		# option_text wins over text unless the cell is null or the column is absent
		text = row.get("option_text")
		if text is None:
			text = row.get("text")
		image_url = row.get("image_url")
		choices.append(
			Choice(
				id=option_id,
				text="" if text is None else _render(text),
				icon=_field(row, "icon"),
				image_url=None if _is_blank(image_url) else cell_text(image_url),
			)
		)
	return by_question


def sort_questions(table: Table) -> List[Dict[str, Any]]:
	"""Ascending by numeric ``order``; rows whose order is not a number follow in sheet order."""
	numbered = []
	unnumbered = []
	for row in table.rows:
		key = _order_key(row.get("order", _MISSING))
		(unnumbered if math.isnan(key) else numbered).append((key, row))
	numbered.sort(key=lambda pair: pair[0])
	return [row for _, row in numbered] + [row for _, row in unnumbered]


def assemble_quiz(
	questions_table: Table,
	options_table: Table,
	jobs_table: Table,
	map_table: Table,
	*,
	spreadsheet_id: str,
) -> QuizData:
	if not questions_table:
		raise EmptyTableError(QUESTIONS, spreadsheet_id)
	if not options_table:
		raise EmptyTableError(OPTIONS, spreadsheet_id)

	jobs = parse_jobs(jobs_table)
	option_job_map = parse_option_job_map(map_table)
	options_by_question = group_options(options_table)

	candidates: List[Question] = []
	for row in sort_questions(questions_table):
		question_id = _id(row, "question_id")
		if not question_id:
			continue
		candidates.append(
			Question(
				id=question_id,
				text=_field(row, "text"),
				choices=tuple(options_by_question.get(question_id, ())),
			)
		)
	if not candidates:
		raise MissingQuestionIdsError(QUESTIONS)

	questions = [q for q in candidates if q.choices]
	if not questions:
		question_ids = _unique([_id(r, "question_id") for r in questions_table.rows])
		option_question_ids = _unique([_id(r, "question_id") for r in options_table.rows])
		if question_ids and not option_question_ids:
			raise MissingLinkColumnError(options_table.headers)
		raise UnlinkedQuestionsError(question_ids, option_question_ids)

	return QuizData(questions=tuple(questions), jobs=tuple(jobs), option_job_map=tuple(option_job_map))


class QuizDataLoader:
	def __init__(self, source: TableSource, spreadsheet_id: str) -> None:
		self.source = source
		self.spreadsheet_id = spreadsheet_id

	async def _fetch_all(self) -> List[Table]:
		results = await asyncio.gather(
			*(self.source.fetch_table(name) for name in SHEET_NAMES),
			return_exceptions=True,
		)
		tables: List[Table] = []
		for name, result in zip(SHEET_NAMES, results):
			if isinstance(result, BaseException):
				raise result
			tables.append(Table(name, result))
		return tables

	async def load(self) -> QuizData:
		questions, options, jobs, option_job_map = await self._fetch_all()
		quiz = assemble_quiz(questions, options, jobs, option_job_map, spreadsheet_id=self.spreadsheet_id)
		logger.info(
			"Loaded quiz from %s: %d questions, %d jobs, %d option-job links",
			self.spreadsheet_id,
			len(quiz.questions),
			len(quiz.jobs),
			len(quiz.option_job_map),
		)
		return quiz

	async def get_debug_info(self) -> DebugReport:
		probes = await asyncio.gather(*(self.source.probe_table(name) for name in SHEET_NAMES))
		return DebugReport(spreadsheet_id=self.spreadsheet_id, probes=list(probes))


async def load_with_diagnostics(loader: QuizDataLoader) -> tuple[Optional[QuizData], Optional[DataLoadError], Optional[DebugReport]]:
	"""Load the quiz; on failure also collect a debug report without masking the error."""
	try:
		return await loader.load(), None, None
	except DataLoadError as err:
		primary = err
	debug: Optional[DebugReport] = None
	try:
		debug = await loader.get_debug_info()
	except Exception:
		logger.exception("Failed to fetch debug info")
	return None, primary, debug
