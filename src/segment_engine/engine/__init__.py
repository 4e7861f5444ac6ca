"""Editor core: rolls, swipe previews, feedback and the editor itself."""

from .feedback import FeedbackState
from .roll import RollEngine, RollOutcome, RollStatus
from .swipe import SwipePredictor
from .editor import EditorBus, EditorSnapshot, FieldView, SegmentEditor

__all__ = [
    "EditorBus",
    "EditorSnapshot",
    "FeedbackState",
    "FieldView",
    "RollEngine",
    "RollOutcome",
    "RollStatus",
    "SegmentEditor",
    "SwipePredictor",
]
