"""Flow classification pipeline for FlowTalkers."""

from .models import ClassificationResult, FlowRecord, FlowRequest
from .engine import ClassificationPipeline
from .talkers import top_talkers, zone_matrix

__all__ = [
    "ClassificationResult",
    "FlowRecord",
    "FlowRequest",
    "ClassificationPipeline",
    "top_talkers",
    "zone_matrix",
]
