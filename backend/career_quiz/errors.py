from __future__ import annotations
from typing import Any, Dict, List, Optional


class DataLoadError(Exception):
	"""Base for every failure while turning the spreadsheet into a quiz.

	Errors carry structured context only; long remediation text is built by
	``report.format_load_error`` so callers decide how to present it.
	"""

	kind = "data_load"

	def __init__(self, message: str, *, table: Optional[str] = None) -> None:
		super().__init__(message)
		self.table = table

	def context(self) -> Dict[str, Any]:
		return {"table": self.table}


class TransportError(DataLoadError):
	kind = "transport"

	def __init__(self, table: str, detail: str) -> None:
		super().__init__(f"Failed to load sheet '{table}': {detail}", table=table)
		self.detail = detail

	def context(self) -> Dict[str, Any]:
		return {"table": self.table, "detail": self.detail}


class RemoteDataError(DataLoadError):
	"""The sheet endpoint answered, but reported an error for the table."""

	kind = "remote"

	ACCESS_DENIED = "access_denied"
	SHEET_NOT_FOUND = "sheet_not_found"
	REMOTE_ERROR = "remote_error"

	def __init__(self, table: str, reason: str, detail: Optional[str] = None) -> None:
		super().__init__(f"Sheet '{table}' returned an error ({reason})" + (f": {detail}" if detail else ""), table=table)
		self.reason = reason
		self.detail = detail

	def context(self) -> Dict[str, Any]:
		return {"table": self.table, "reason": self.reason, "detail": self.detail}


class DataValidationError(DataLoadError):
	kind = "validation"


class EmptyTableError(DataValidationError):
	kind = "empty_table"

	def __init__(self, table: str, spreadsheet_id: str) -> None:
		super().__init__(f"No rows found in sheet '{table}' of spreadsheet '{spreadsheet_id}'", table=table)
		self.spreadsheet_id = spreadsheet_id

	def context(self) -> Dict[str, Any]:
		return {"table": self.table, "spreadsheet_id": self.spreadsheet_id}


class MissingQuestionIdsError(DataValidationError):
	kind = "missing_question_ids"
	column = "question_id"

	def __init__(self, table: str = "Questions") -> None:
		super().__init__(f"Sheet '{table}' has rows but no usable '{self.column}' values", table=table)

	def context(self) -> Dict[str, Any]:
		return {"table": self.table, "column": self.column}


class MissingLinkColumnError(DataValidationError):
	kind = "missing_link_column"
	column = "question_id"

	def __init__(self, options_headers: List[str], table: str = "Options") -> None:
		super().__init__(f"Sheet '{table}' has no usable '{self.column}' linking column", table=table)
		self.options_headers = list(options_headers)

	def context(self) -> Dict[str, Any]:
		return {"table": self.table, "column": self.column, "options_headers": self.options_headers}


class UnlinkedQuestionsError(DataValidationError):
	kind = "unlinked_questions"

	def __init__(self, question_ids: List[str], option_question_ids: List[str]) -> None:
		super().__init__("No question id in 'Questions' matches a linking id in 'Options'", table="Options")
		self.question_ids = list(question_ids)
		self.option_question_ids = list(option_question_ids)

	def context(self) -> Dict[str, Any]:
		return {
			"table": self.table,
			"question_ids": self.question_ids,
			"option_question_ids": self.option_question_ids,
		}
