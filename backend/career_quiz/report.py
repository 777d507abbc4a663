from __future__ import annotations
from datetime import date
from typing import List, Optional

from .errors import (
	DataLoadError,
	EmptyTableError,
	MissingLinkColumnError,
	MissingQuestionIdsError,
	RemoteDataError,
	TransportError,
	UnlinkedQuestionsError,
)
from .models import DebugReport, ScoringResults, TableProbe

GENERIC_LOAD_MESSAGE = "Failed to load quiz data. Please check your internet connection and try again."


def _bracketed(values: List[str]) -> str:
	return f"[{', '.join(values)}]"


def format_load_error(err: DataLoadError) -> str:
	"""Human-readable remediation text for a load failure."""
	if isinstance(err, EmptyTableError):
		return (
			f"Failed to load any data from the '{err.table}' sheet in the spreadsheet with ID: '{err.spreadsheet_id}'. "
			f"Please verify: 1. The sheet is named '{err.table}' (case matters). 2. The sheet contains data. "
			"3. The spreadsheet ID in your URL matches the ID in this message."
		)
	if isinstance(err, MissingQuestionIdsError):
		return (
			f"Found rows in the '{err.table}' sheet, but could not find any valid '{err.column}' values. "
			f"Please check the '{err.column}' column."
		)
	if isinstance(err, MissingLinkColumnError):
		return (
			f"The app can't find the linking '{err.column}' column in your '{err.table}' sheet.\n\n"
			f"This almost always means the column header in the '{err.table}' sheet is not named '{err.column}'.\n\n"
			f"Here are the exact column headers the app found in your '{err.table}' sheet:\n"
			f"{_bracketed(err.options_headers)}\n\n"
			f"Please rename the correct column to '{err.column}' (case does not matter)."
		)
	if isinstance(err, UnlinkedQuestionsError):
		return (
			"Failed to link questions to answers. Here's a diagnostic report of what the app is seeing:\n\n"
			"Found these IDs in your 'Questions' sheet:\n"
			f"{_bracketed(err.question_ids)}\n\n"
			"Found these linking IDs in your 'Options' sheet:\n"
			f"{_bracketed(err.option_question_ids)}\n\n"
			"For the quiz to work, at least one ID from the 'Questions' list must exactly match an ID from the "
			"'Options' list. Please compare them carefully for typos or other differences."
		)
	if isinstance(err, RemoteDataError):
		if err.reason == RemoteDataError.ACCESS_DENIED:
			return (
				f"Could not access Google Sheet \"{err.table}\". Please make sure your spreadsheet is public by going to "
				"\"File\" > \"Share\" > \"Publish to web\" in Google Sheets."
			)
		if err.reason == RemoteDataError.SHEET_NOT_FOUND:
			return (
				f"Could not find a sheet named \"{err.table}\". Please check for typos or case-sensitivity "
				"(e.g., \"Options\" vs \"options\")."
			)
		return err.detail or f"An error occurred while loading sheet \"{err.table}\"."
	if isinstance(err, TransportError):
		return (
			f"Invalid response for sheet \"{err.table}\". Please check if the sheet name is correct and the "
			f"spreadsheet is published to the web. ({err.detail})"
		)
	return str(err) or GENERIC_LOAD_MESSAGE


def _format_probe(probe: TableProbe) -> str:
	if not probe.ok:
		return f"FAILURE\n  - Reason: {probe.reason}\n  - Details: {probe.details}"
	labels = ", ".join(f'"{label}"' if label else '"NO_LABEL"' for label in probe.column_labels) or "NONE"
	return (
		"SUCCESS\n"
		f"  - Rows Found: {probe.row_count}\n"
		f"  - Columns Found: {probe.column_count}\n"
		f"  - Column Labels: [{labels}]"
	)


def format_debug_report(report: DebugReport) -> str:
	sections = [f'--- Fetching sheet: "{p.table}" ---\n{_format_probe(p)}' for p in report.probes]
	return f"Spreadsheet ID: {report.spreadsheet_id}\n\n" + "\n\n".join(sections)


def render_report(
	student_name: str,
	student_class: str,
	results: ScoringResults,
	insight: str,
	*,
	on: Optional[date] = None,
) -> str:
	"""Plain-text Career Explorer Report, suitable for printing."""
	on = on or date.today()
	top = " / ".join(j.job_name for j in results.top_jobs) if results.top_jobs else "N/A"
	width = max([len("Job / Career")] + [len(s.job_name) for s in results.sorted_scores])
	lines = [
		"Career Explorer Report",
		"",
		f"Student: {student_name}",
		f"Class: {student_class}",
		f"Date: {on.isoformat()}",
		"",
		"Top Job Suggestion(s):",
		top,
		"",
		"Full Score Report:",
		f"{'Job / Career'.ljust(width)}  Score",
		f"{'-' * width}  -----",
	]
	lines.extend(f"{s.job_name.ljust(width)}  {s.score}" for s in results.sorted_scores)
	lines += ["", "Personalized Insight:", insight]
	return "\n".join(lines) + "\n"
