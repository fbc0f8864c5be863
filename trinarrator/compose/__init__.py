"""
Filter/Overlay Composer Module

Builds the ffmpeg invocation that burns the narrator tracks into the video.
"""

from .composer import (
    DEFAULT_OVERLAY_ORDER,
    EncoderInvocationSpec,
    OverlayStep,
    compose_encoding,
    get_codec_options,
)

__all__ = [
    "DEFAULT_OVERLAY_ORDER",
    "EncoderInvocationSpec",
    "OverlayStep",
    "compose_encoding",
    "get_codec_options",
]
