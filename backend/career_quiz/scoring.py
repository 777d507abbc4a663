from __future__ import annotations
from typing import Dict, Iterable, List, Sequence

from .models import Job, OptionJobMapItem, ScoreEntry, ScoringResults, TopJob


def unknown_job_name(job_id: str) -> str:
	return f"Unknown Job ({job_id})"


def compute_scores(
	selected_option_ids: Iterable[str],
	jobs: Sequence[Job],
	option_job_map: Sequence[OptionJobMapItem],
) -> ScoringResults:
	"""Count, per job, how many selected options point at it.

	Selecting the same option twice counts twice. Ties keep the order in which
	jobs first received a point.
	"""
	option_to_jobs: Dict[str, List[str]] = {}
	for item in option_job_map:
		option_to_jobs.setdefault(item.option_id, []).append(item.job_id)

	counts: Dict[str, int] = {}  # job_id -> count, in first-increment order
	for option_id in selected_option_ids:
		for job_id in option_to_jobs.get(option_id, ()):
			counts[job_id] = counts.get(job_id, 0) + 1

	if not counts:
		return ScoringResults()

	max_score = max(counts.values())
	names = {job.id: job.name for job in jobs}

	def name_of(job_id: str) -> str:
		return names.get(job_id) or unknown_job_name(job_id)

	# sorted() is stable, so equal scores stay in accumulation order
	sorted_scores = [
		ScoreEntry(job_id=job_id, job_name=name_of(job_id), score=score)
		for job_id, score in sorted(counts.items(), key=lambda kv: -kv[1])
	]
	top_jobs = [TopJob(job_id=job_id, job_name=name_of(job_id)) for job_id, score in counts.items() if score == max_score]
	counts_by_name = {entry.job_name: entry.score for entry in sorted_scores}

	return ScoringResults(counts=counts_by_name, top_jobs=top_jobs, sorted_scores=sorted_scores)


def other_directions(results: ScoringResults, limit: int = 2) -> List[ScoreEntry]:
	"""Best-scoring jobs that are not among the top jobs."""
	top_ids = {job.job_id for job in results.top_jobs}
	return [entry for entry in results.sorted_scores if entry.job_id not in top_ids][:limit]
