from __future__ import annotations
import logging
from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from ..gemini_client import GeminiClient
from ..insight import generate_insight
from ..loader import QuizDataLoader, TableSource, load_with_diagnostics
from ..models import QuizData, ScoreEntry, ScoringResults, TableProbe
from ..report import format_debug_report, format_load_error, render_report
from ..scoring import compute_scores, other_directions
from ..settings import settings
from ..sheets import SheetsClient
from ..submission import ResultsWebhook, build_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["quiz"])


class ResultsRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	student_name: str = Field(default="", alias="studentName")
	student_class: str = Field(default="", alias="studentClass")
	answers: List[str] = Field(default_factory=list)


class ResultsResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	results: ScoringResults
	other_directions: List[ScoreEntry] = Field(alias="otherDirections")
	insight: str
	insight_error: Optional[str] = Field(default=None, alias="insightError")
	submission: str


class DebugResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	spreadsheet_id: str = Field(alias="spreadsheetId")
	report: str
	probes: List[TableProbe]


async def get_table_source() -> AsyncIterator[TableSource]:
	client = SheetsClient(settings.spreadsheet_id)
	try:
		yield client
	finally:
		await client.aclose()


async def get_text_generator() -> AsyncIterator[Optional[GeminiClient]]:
	if not settings.gemini_api_key:
		yield None
		return
	client = GeminiClient()
	try:
		yield client
	finally:
		await client.aclose()


def get_results_webhook() -> ResultsWebhook:
	return ResultsWebhook(settings.results_webhook_url)


def get_loader(source: TableSource = Depends(get_table_source)) -> QuizDataLoader:
	return QuizDataLoader(source, settings.spreadsheet_id)


async def _load_or_fail(loader: QuizDataLoader) -> QuizData:
	quiz, err, debug = await load_with_diagnostics(loader)
	if quiz is not None:
		return quiz
	logger.warning("Quiz load failed (%s): %s", err.kind, err)
	body = {
		"message": format_load_error(err),
		"kind": err.kind,
		"context": err.context(),
		"debugInfo": format_debug_report(debug) if debug is not None else None,
	}
	raise HTTPException(status_code=502, detail=body)


@router.get("", response_model=QuizData)
async def get_quiz(loader: QuizDataLoader = Depends(get_loader)):
	return await _load_or_fail(loader)


@router.get("/debug", response_model=DebugResponse)
async def get_debug(loader: QuizDataLoader = Depends(get_loader)):
	report = await loader.get_debug_info()
	return DebugResponse(spreadsheet_id=report.spreadsheet_id, report=format_debug_report(report), probes=report.probes)


@router.post("/results", response_model=ResultsResponse)
async def post_results(
	req: ResultsRequest,
	loader: QuizDataLoader = Depends(get_loader),
	generator: Optional[GeminiClient] = Depends(get_text_generator),
	webhook: ResultsWebhook = Depends(get_results_webhook),
):
	quiz = await _load_or_fail(loader)
	results = compute_scores(req.answers, quiz.jobs, quiz.option_job_map)
	insight, insight_error = await generate_insight(generator, req.student_name, results)
	submission = await webhook.submit(build_payload(req.student_name, req.student_class, results, insight))
	return ResultsResponse(
		results=results,
		other_directions=other_directions(results),
		insight=insight,
		insight_error=insight_error,
		submission=submission,
	)


@router.post("/report", response_class=PlainTextResponse)
async def post_report(
	req: ResultsRequest,
	loader: QuizDataLoader = Depends(get_loader),
	generator: Optional[GeminiClient] = Depends(get_text_generator),
):
	quiz = await _load_or_fail(loader)
	results = compute_scores(req.answers, quiz.jobs, quiz.option_job_map)
	insight, _ = await generate_insight(generator, req.student_name, results)
	return PlainTextResponse(render_report(req.student_name, req.student_class, results, insight))
