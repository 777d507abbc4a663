from __future__ import annotations
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
	# Wire names follow the browser client (camelCase where it uses it);
	# Python code always goes through the field names.
	model_config = ConfigDict(frozen=True, populate_by_name=True)


class Choice(_Frozen):
	id: str
	text: str = ""
	icon: str = ""
	image_url: Optional[str] = Field(default=None, alias="imageUrl")


class Question(_Frozen):
	id: str
	text: str = ""
	choices: Tuple[Choice, ...] = ()


class Job(_Frozen):
	id: str
	name: str = ""
	cluster_code: str = Field(default="", alias="clusterCode")
	cluster_name: str = Field(default="", alias="clusterName")
	emoji: str = ""


class OptionJobMapItem(_Frozen):
	option_id: str
	job_id: str


class QuizData(_Frozen):
	questions: Tuple[Question, ...] = ()
	jobs: Tuple[Job, ...] = ()
	option_job_map: Tuple[OptionJobMapItem, ...] = Field(default=(), alias="optionJobMap")


class TopJob(_Frozen):
	job_id: str
	job_name: str


class ScoreEntry(_Frozen):
	job_id: str
	job_name: str
	score: int = Field(ge=0)


class ScoringResults(_Frozen):
	counts: Dict[str, int] = Field(default_factory=dict)
	top_jobs: List[TopJob] = Field(default_factory=list, alias="topJobs")
	sorted_scores: List[ScoreEntry] = Field(default_factory=list, alias="sortedScores")


class TableProbe(_Frozen):
	"""Raw shape of one sheet as seen by the transport, for error diagnostics."""
	table: str
	ok: bool
	row_count: int = Field(default=0, alias="rowCount")
	column_count: int = Field(default=0, alias="columnCount")
	column_labels: List[str] = Field(default_factory=list, alias="columnLabels")
	reason: Optional[str] = None
	details: Optional[str] = None


class DebugReport(_Frozen):
	spreadsheet_id: str = Field(alias="spreadsheetId")
	probes: List[TableProbe] = Field(default_factory=list)
