"""
ffmpeg argument builders for thumbnail extraction.

Both media kinds share the same scale-and-pad filter: fit inside W×H keeping
the aspect ratio, then pad with black to exactly W×H. Output is a single
baseline JPEG frame.
"""
from __future__ import annotations

# Prepended to every invocation: no banner, never wait on stdin, overwrite,
# and only report real errors on stderr.
GLOBAL_ARGS: tuple[str, ...] = ("-hide_banner", "-nostdin", "-y", "-loglevel", "error")


def scale_pad_filter(width: int, height: int) -> str:
    return (
        f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
        f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2:black"
    )


def image_thumbnail_args(
    input_name: str,
    output_name: str,
    width: int,
    height: int,
    quality: int,
) -> list[str]:
    return [
        "-i", input_name,
        "-frames:v", "1",
        "-vf", scale_pad_filter(width, height),
        "-f", "mjpeg",
        "-q:v", str(quality),
        output_name,
    ]


def video_thumbnail_args(
    input_name: str,
    output_name: str,
    width: int,
    height: int,
    quality: int,
    seek_seconds: float | None = 1.0,
) -> list[str]:
    """Grab one frame at ``seek_seconds`` (or the first frame when ``None``)."""
    args = ["-i", input_name]
    if seek_seconds:
        args += ["-ss", f"{seek_seconds:g}"]
    args += [
        "-frames:v", "1",
        "-vf", scale_pad_filter(width, height),
        "-f", "mjpeg",
        "-q:v", str(quality),
        output_name,
    ]
    return args
