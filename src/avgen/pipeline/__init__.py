"""Generation pipeline: retry loop and voice-over."""

from .narration import NarrationPipeline
from .orchestrator import RetryOrchestrator

__all__ = ["NarrationPipeline", "RetryOrchestrator"]
