"""
Batch editing of several banners.

Each job is an independent edit with its own working image. Jobs run
sequentially by default or on a small thread pool; results always come back
in job order, and a failing job does not stop the others.
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from BE_Libs.EditorLib.edit_orchestrator import BannerEditor, EditResult, UserRegions
from BE_Libs.ImageEditingLib.image_models import SemanticValues
from BE_Libs.constants import MAX_BATCH_WORKERS
from BE_Libs.errors import BannerEditError

logger = logging.getLogger(__name__)


@dataclass
class BatchJob:
    source: Any
    values: Union[SemanticValues, Dict[str, Any]]
    user_regions: UserRegions = None
    label: Optional[str] = None


@dataclass
class BatchItemResult:
    """Outcome of one batch job.

    Attributes:
        index: Position of the job in the batch
        label: Job label, if any
        result: EditResult on success
        error: Error message on failure
    """
    index: int
    label: Optional[str] = None
    result: Optional[EditResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


class BatchEditor:
    """
    Runs many edits with one BannerEditor.

    Args:
        editor: Editor used for every job
        max_workers: Parallel edits (1 = sequential, capped at MAX_BATCH_WORKERS)
    """

    def __init__(self, editor: BannerEditor, max_workers: int = 1):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.editor = editor
        self.max_workers = min(max_workers, MAX_BATCH_WORKERS)

    def _run_job(self, index: int, job: BatchJob) -> BatchItemResult:
        try:
            result = self.editor.edit(job.source, job.values, job.user_regions)
        except (BannerEditError, ValueError) as e:
            logger.error(f"Batch job {index} ({job.label or 'unlabeled'}) failed: {e}")
            return BatchItemResult(index=index, label=job.label, error=str(e))
        return BatchItemResult(index=index, label=job.label, result=result)

    def edit_batch(self, jobs: Sequence[BatchJob]) -> List[BatchItemResult]:
        """
        Edit every job.

        Returns:
            One BatchItemResult per job, in job order
        """
        jobs = list(jobs)
        if not jobs:
            return []

        if self.max_workers == 1 or len(jobs) == 1:
            results = [self._run_job(index, job) for index, job in enumerate(jobs)]
        else:
            results: List[Optional[BatchItemResult]] = [None] * len(jobs)
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures: Dict[concurrent.futures.Future, int] = {
                    executor.submit(self._run_job, index, job): index
                    for index, job in enumerate(jobs)
                }
                for future in concurrent.futures.as_completed(futures):
                    results[futures[future]] = future.result()

        succeeded = sum(1 for item in results if item.ok)
        logger.info(f"Batch complete: {succeeded}/{len(jobs)} succeeded")
        return results
