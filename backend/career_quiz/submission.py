from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional

import httpx

from .models import ScoringResults

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "YOUR_GOOGLE_APPS_SCRIPT_URL_HERE"

NOT_CONFIGURED = "not_configured"
SUCCESS = "success"
ERROR = "error"


def build_payload(student_name: str, student_class: str, results: ScoringResults, insight: str) -> Dict[str, Any]:
	return {
		"studentName": student_name,
		"studentClass": student_class,
		"topJobs": " / ".join(j.job_name for j in results.top_jobs),
		"geminiDescription": insight,
		"allScores": json.dumps([s.model_dump() for s in results.sorted_scores]),
	}


class ResultsWebhook:
	"""Posts finished results to a Google Apps Script web app."""

	def __init__(self, url: Optional[str], *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
		self.url = url
		self._transport = transport

	@property
	def configured(self) -> bool:
		return bool(self.url) and self.url != PLACEHOLDER_URL

	async def submit(self, payload: Dict[str, Any]) -> str:
		if not self.configured:
			logger.warning("RESULTS_WEBHOOK_URL is not set. Results will not be saved.")
			return NOT_CONFIGURED
		# text/plain keeps Apps Script away from a CORS preflight
		headers = {"Content-Type": "text/plain;charset=utf-8"}
		try:
			async with httpx.AsyncClient(timeout=30, transport=self._transport, follow_redirects=True) as client:
				r = await client.post(self.url, headers=headers, content=json.dumps(payload))
				r.raise_for_status()
				body = r.json()
		except (httpx.HTTPError, ValueError) as err:
			logger.error("Failed to submit results: %s", err)
			return ERROR
		if not isinstance(body, dict) or body.get("status") != "success":
			message = body.get("message") if isinstance(body, dict) else None
			logger.error("Failed to submit results: %s", message or "Submission failed in script.")
			return ERROR
		return SUCCESS
