from __future__ import annotations
import logging
from typing import Optional, Protocol

from .models import ScoringResults

logger = logging.getLogger(__name__)

BALANCED_INTERESTS_TEXT = (
	"You have a balanced set of interests! This means you're open to many different possibilities. "
	"Keep exploring activities you enjoy to discover what you're most passionate about."
)
FALLBACK_INSIGHT_TEXT = (
	"Your unique mix of traits opens up many possibilities! Whether it is helping others, being creative, "
	"or using technology, you have the potential to shine in fields you are passionate about."
)
INSIGHT_ERROR = "Could not generate personalized insight. Please try again later."


class TextGenerator(Protocol):
	async def generate(self, prompt: str) -> str: ...


def build_insight_prompt(student_name: str, results: ScoringResults) -> str:
	top_jobs_text = " or ".join(j.job_name for j in results.top_jobs)
	scores_text = ", ".join(f"{s.job_name} (Score: {s.score})" for s in results.sorted_scores[:5])
	return (
		f"You are a friendly and encouraging career counselor for a young person named {student_name}. "
		f"Their quiz results suggest their top job interests are: {top_jobs_text}. "
		f"Their top traits based on scores are: {scores_text}.\n\n"
		"Based on these results, write a personalized summary of about 50-70 words. "
		"Explain why these jobs might be a good fit and encourage them to explore these paths. "
		"Use a warm, positive tone."
	)


async def generate_insight(
	generator: Optional[TextGenerator],
	student_name: str,
	results: ScoringResults,
) -> tuple[str, Optional[str]]:
	"""Return ``(insight_text, error_message)``; never raises."""
	if not results.top_jobs:
		return BALANCED_INTERESTS_TEXT, None
	if generator is None:
		logger.warning("No text generator configured; using fallback insight")
		return FALLBACK_INSIGHT_TEXT, INSIGHT_ERROR
	try:
		text = await generator.generate(build_insight_prompt(student_name, results))
	except Exception:
		logger.exception("Insight generation failed")
		return FALLBACK_INSIGHT_TEXT, INSIGHT_ERROR
	text = (text or "").strip()
	if not text:
		return FALLBACK_INSIGHT_TEXT, INSIGHT_ERROR
	return text, None
