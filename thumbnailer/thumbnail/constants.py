"""
Thumbnail — static constants and enum types.
"""
import enum
import re


class MediaKind(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


# Accepted declared MIME types, in the order reported back to clients.
SUPPORTED_CONTENT_TYPES: list[str] = [
    "image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp",
    "video/mp4", "video/avi", "video/mov", "video/wmv", "video/flv", "video/webm",
]

# Extension used for the staged input when the upload name has none we trust.
FALLBACK_EXTENSION = "bin"
SAFE_EXTENSION = re.compile(r"[a-z0-9]{1,10}")

PREFLIGHT_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# Leading integer of a dimension field: "300px" → 300, "12.5" → 12.
LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")

# ffmpeg diagnostics meaning the seek landed past the last frame.
NO_FRAME_MARKERS: tuple[str, ...] = (
    "nothing was encoded",
    "Output file is empty",
)
