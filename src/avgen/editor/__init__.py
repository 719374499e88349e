"""Audio/video post-processing for narrated renders."""

from .audio import synthesize_speech, parse_tts_duration
from .compositor import needs_extension, extend_video, merge_audio
from .probe import probe_duration

__all__ = [
    # Audio
    "synthesize_speech",
    "parse_tts_duration",
    # Compositor
    "needs_extension",
    "extend_video",
    "merge_audio",
    # Probe
    "probe_duration",
]
