"""
Unit tests for batch_editor module.

Tests sequential and threaded batch editing, ordering and error isolation.
"""

import threading
import time
from unittest.mock import Mock

import pytest

from BE_Libs.pillow_compat import Image
from BE_Libs.EditorLib.batch_editor import BatchEditor, BatchJob
from BE_Libs.EditorLib.edit_orchestrator import BannerEditor
from BE_Libs.errors import ImageDecodeError


def _banner(width):
    return Image.new("RGB", (width, 400), (255, 255, 255))


class TestBatchEditor:
    """Tests for BatchEditor."""

    def test_empty_batch(self):
        assert BatchEditor(BannerEditor()).edit_batch([]) == []

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            BatchEditor(BannerEditor(), max_workers=0)

    def test_caps_workers(self):
        assert BatchEditor(BannerEditor(), max_workers=16).max_workers == 4

    def test_sequential_results_in_order(self, sample_values):
        jobs = [BatchJob(_banner(600 + i * 100), sample_values, label=f"job{i}") for i in range(3)]
        results = BatchEditor(BannerEditor()).edit_batch(jobs)

        assert [item.index for item in results] == [0, 1, 2]
        assert [item.label for item in results] == ["job0", "job1", "job2"]
        assert [item.result.image.size[0] for item in results] == [600, 700, 800]
        assert all(item.ok for item in results)

    def test_failure_does_not_stop_other_jobs(self, sample_values):
        jobs = [
            BatchJob(_banner(600), sample_values),
            BatchJob(b"not an image", sample_values),
            BatchJob(_banner(800), sample_values),
        ]
        results = BatchEditor(BannerEditor(), max_workers=2).edit_batch(jobs)

        assert [item.ok for item in results] == [True, False, True]
        assert results[1].result is None
        assert results[1].error

    def test_parallel_results_keep_job_order(self, sample_values):
        editor = Mock()
        lock = threading.Lock()
        active = []
        peak = []

        def slow_edit(source, values, user_regions):
            with lock:
                active.append(source)
                peak.append(len(active))
            # Later jobs finish first
            time.sleep(0.05 * (4 - source))
            with lock:
                active.remove(source)
            return f"result-{source}"

        editor.edit.side_effect = slow_edit
        jobs = [BatchJob(i, sample_values) for i in range(4)]

        results = BatchEditor(editor, max_workers=4).edit_batch(jobs)

        assert [item.result for item in results] == ["result-0", "result-1", "result-2", "result-3"]
        assert max(peak) > 1

    def test_unexpected_errors_propagate(self, sample_values):
        editor = Mock()
        editor.edit.side_effect = KeyError("bug")
        with pytest.raises(KeyError):
            BatchEditor(editor).edit_batch([BatchJob(_banner(100), sample_values)])

    def test_decode_error_message_is_kept(self, sample_values):
        editor = Mock()
        editor.edit.side_effect = ImageDecodeError("cannot decode")
        results = BatchEditor(editor).edit_batch([BatchJob(b"", sample_values)])
        assert results[0].error == "cannot decode"
