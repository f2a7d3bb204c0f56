"""
EditorLib - Banner edit orchestration

The BannerEditor ties region resolution and rendering together; the
BatchEditor runs many edits; campaign helpers build replacement values.
"""

from BE_Libs.EditorLib.edit_orchestrator import BannerEditor, EditOptions, EditResult
from BE_Libs.EditorLib.batch_editor import BatchEditor, BatchItemResult, BatchJob
from BE_Libs.EditorLib.campaign_values import (
    build_semantic_values,
    calculate_price,
    resolve_campaign_title,
)

__all__ = [
    "BannerEditor",
    "EditOptions",
    "EditResult",
    "BatchEditor",
    "BatchItemResult",
    "BatchJob",
    "build_semantic_values",
    "calculate_price",
    "resolve_campaign_title",
]
