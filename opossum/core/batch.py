"""
Batch Analyses

Run several independent over-representation analyses (e.g. one per
species, or one per TF cluster set) in parallel:
- Job queue management
- Parallel execution on a thread pool
- Per-job failure isolation and cancellation
"""

import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Hashable, List, Mapping, Optional, Union

from ..config import settings
from ..models.schemas import AnalysisParams
from .analysis import AnalysisOutcome, run_analysis
from .counts import CountsTable
from .values import ValuesTable

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Job execution status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class AnalysisJob:
    """One analysis queued for batch execution."""

    id: str
    name: str
    background: CountsTable
    target: CountsTable
    params: AnalysisParams
    tf_widths: Optional[Mapping[Hashable, int]] = None
    background_values: Optional[ValuesTable] = None
    target_values: Optional[ValuesTable] = None
    status: JobStatus = JobStatus.PENDING
    outcome: Optional[AnalysisOutcome] = None
    error: str = ""
    created_at: str = ""
    started_at: str = ""
    completed_at: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "error": self.error,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "outcome": self.outcome.to_dict() if self.outcome else None,
        }


class BatchRunner:
    """
    Run independent analyses in parallel.

    Each job reads only its own input tables and produces its own result
    set, so no locking is needed around the analyses themselves; the lock
    only guards job status transitions.
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or settings.batch_max_workers
        self.jobs: Dict[str, AnalysisJob] = {}
        self._lock = threading.Lock()

    def submit(
        self,
        name: str,
        background: CountsTable,
        target: CountsTable,
        params: Union[AnalysisParams, Mapping],
        tf_widths: Optional[Mapping[Hashable, int]] = None,
        background_values: Optional[ValuesTable] = None,
        target_values: Optional[ValuesTable] = None,
    ) -> AnalysisJob:
        """Queue a new analysis job."""
        if not isinstance(params, AnalysisParams):
            params = AnalysisParams(**params)

        job = AnalysisJob(
            id=str(uuid.uuid4())[:8],
            name=name,
            background=background,
            target=target,
            params=params,
            tf_widths=tf_widths,
            background_values=background_values,
            target_values=target_values,
        )

        with self._lock:
            self.jobs[job.id] = job

        return job

    def run(self, job_ids: Optional[List[str]] = None) -> List[AnalysisJob]:
        """
        Run pending jobs and wait for them to finish.

        Args:
            job_ids: Jobs to run; default all pending jobs

        Returns:
            The jobs that were run, in submission order
        """
        with self._lock:
            if job_ids:
                jobs_to_run = [self.jobs[jid] for jid in job_ids if jid in self.jobs]
            else:
                jobs_to_run = list(self.jobs.values())
            jobs_to_run = [j for j in jobs_to_run if j.status == JobStatus.PENDING]

        if not jobs_to_run:
            return []

        logger.info(f"Running {len(jobs_to_run)} analysis jobs with {self.max_workers} workers")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self._run_job, job): job for job in jobs_to_run}
            for future in as_completed(futures):
                job = futures[future]
                # _run_job records its own failures
                future.result()
                logger.info(f"Job {job.id} ({job.name}) finished: {job.status.value}")

        return jobs_to_run

    def _run_job(self, job: AnalysisJob) -> AnalysisJob:
        with self._lock:
            if job.status != JobStatus.PENDING:
                return job
            job.status = JobStatus.RUNNING
            job.started_at = datetime.now().isoformat()

        try:
            outcome = run_analysis(
                job.background,
                job.target,
                job.params,
                tf_widths=job.tf_widths,
                background_values=job.background_values,
                target_values=job.target_values,
            )
        except Exception as e:
            logger.error(f"Job {job.id} ({job.name}) failed: {e}")
            with self._lock:
                if job.status == JobStatus.RUNNING:
                    job.status = JobStatus.FAILED
                    job.error = str(e)
                    job.completed_at = datetime.now().isoformat()
            return job

        with self._lock:
            # A job cancelled while running keeps no results
            if job.status == JobStatus.RUNNING:
                job.outcome = outcome
                job.status = JobStatus.COMPLETED
                job.completed_at = datetime.now().isoformat()

        return job

    def cancel(self, job_id: str) -> bool:
        """Cancel a pending or running job; its results are discarded."""
        with self._lock:
            job = self.jobs.get(job_id)
            if job and job.status in (JobStatus.PENDING, JobStatus.RUNNING):
                job.status = JobStatus.CANCELLED
                job.outcome = None
                job.completed_at = datetime.now().isoformat()
                return True
        return False

    def get_job(self, job_id: str) -> Optional[AnalysisJob]:
        """Get job by ID."""
        return self.jobs.get(job_id)

    def get_queue_status(self) -> Dict[str, int]:
        """Get counts by status."""
        status_counts = {s.value: 0 for s in JobStatus}
        with self._lock:
            for job in self.jobs.values():
                status_counts[job.status.value] += 1
        return status_counts

    def clear_finished(self) -> int:
        """Remove completed, failed and cancelled jobs; returns how many."""
        with self._lock:
            to_remove = [
                jid
                for jid, job in self.jobs.items()
                if job.status in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)
            ]
            for jid in to_remove:
                del self.jobs[jid]
        return len(to_remove)
