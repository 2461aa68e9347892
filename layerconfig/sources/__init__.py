"""
Configuration Sources

The file, decoder and environment stages of a load.
"""

from layerconfig.sources.decoder import decode_into, detect_format
from layerconfig.sources.environment import overlay_environment
from layerconfig.sources.file import read_file, resolve_candidates

__all__ = [
    "read_file",
    "resolve_candidates",
    "decode_into",
    "detect_format",
    "overlay_environment",
]
