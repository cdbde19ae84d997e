import pytest

from thumbnailer.codec.commands import image_thumbnail_args, scale_pad_filter, video_thumbnail_args
from thumbnailer.codec.errors import CodecExecutionError
from thumbnailer.codec.session import CodecSession
from thumbnailer.config import Settings
from thumbnailer.thumbnail import service
from thumbnailer.thumbnail.constants import MediaKind
from thumbnailer.thumbnail.schemas import ThumbnailRequest, ThumbnailResult

from conftest import STUB_JPEG, StubCodec


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("photo.PNG", "png"),
        ("archive.tar.gz", "gz"),
        ("clip.mp4", "mp4"),
        ("noextension", "bin"),
        ("", "bin"),
        (None, "bin"),
        ("trailingdot.", "bin"),
        ("evil.../../etc", "bin"),
        ("weird.ext with space", "bin"),
    ],
)
def test_input_extension(filename, expected) -> None:
    assert service.input_extension(filename) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 180),
        ("", 180),
        ("abc", 180),
        ("0", 180),
        ("-20", 180),
        ("12.5", 12),
        ("300px", 300),
        ("+64", 64),
        ("px300", 180),
        ("-0", 180),
        (" 64 ", 64),
        ("320", 320),
        ("100000", 4096),
    ],
)
def test_resolve_dimension(raw, expected) -> None:
    assert service.resolve_dimension(raw, 180, 4096) == expected


def test_resolve_dimension_ignores_non_text_values() -> None:
    assert service.resolve_dimension(object(), 180, 4096) == 180
    assert service.resolve_dimension(b"64", 180, 4096) == 180


def test_normalize_content_type() -> None:
    assert service.normalize_content_type("Image/PNG; charset=binary") == "image/png"
    assert service.normalize_content_type(None) == ""
    assert service.is_supported_content_type("video/webm")
    assert not service.is_supported_content_type("application/pdf")
    assert not service.is_supported_content_type("video/quicktime")


def test_request_kind_follows_mime_prefix() -> None:
    video = ThumbnailRequest(content_type="video/avi", data=b"", width=1, height=1)
    image = ThumbnailRequest(content_type="image/gif", data=b"", width=1, height=1)
    assert video.kind is MediaKind.VIDEO
    assert image.kind is MediaKind.IMAGE


def test_result_filename_embeds_dimensions() -> None:
    assert ThumbnailResult(data=b"x", width=320, height=240).filename == "thumbnail_320x240.jpg"


def test_scale_pad_filter() -> None:
    assert scale_pad_filter(200, 100) == (
        "scale=200:100:force_original_aspect_ratio=decrease,"
        "pad=200:100:(ow-iw)/2:(oh-ih)/2:black"
    )


def test_image_args() -> None:
    assert image_thumbnail_args("in.png", "out.jpg", 180, 180, 2) == [
        "-i", "in.png",
        "-frames:v", "1",
        "-vf", scale_pad_filter(180, 180),
        "-f", "mjpeg",
        "-q:v", "2",
        "out.jpg",
    ]


def test_video_args_seek_and_first_frame() -> None:
    seeking = video_thumbnail_args("in.mp4", "out.jpg", 180, 180, 2, 1.0)
    assert seeking[:4] == ["-i", "in.mp4", "-ss", "1"]
    assert seeking[4:6] == ["-frames:v", "1"]
    assert seeking[-1] == "out.jpg"

    first_frame = video_thumbnail_args("in.mp4", "out.jpg", 180, 180, 2, None)
    assert "-ss" not in first_frame
    assert first_frame[-1] == "out.jpg"


@pytest.mark.asyncio
async def test_generate_thumbnail_with_stub(codec: CodecSession, settings: Settings, stub_codec: StubCodec) -> None:
    request = ThumbnailRequest(filename="a.webp", content_type="image/webp", data=b"webp", width=90, height=60)
    result = await service.generate_thumbnail(codec, request, settings)
    assert result.data == STUB_JPEG
    assert (result.width, result.height) == (90, 60)
    [command] = stub_codec.invocations()
    assert "scale=90:60:" in command


@pytest.mark.asyncio
async def test_video_without_seek_runs_once(codec: CodecSession, settings: Settings, stub_codec: StubCodec) -> None:
    settings.video_seek_seconds = 0
    request = ThumbnailRequest(filename="a.mp4", content_type="video/mp4", data=b"SHORT", width=10, height=10)
    result = await service.generate_thumbnail(codec, request, settings)
    assert result.data == STUB_JPEG
    [command] = stub_codec.invocations()
    assert "-ss" not in command


@pytest.mark.asyncio
async def test_corrupt_video_fails_without_second_invocation(
    codec: CodecSession, settings: Settings, stub_codec: StubCodec
) -> None:
    request = ThumbnailRequest(filename="a.mov", content_type="video/mov", data=b"CORRUPT", width=10, height=10)
    with pytest.raises(CodecExecutionError, match="Invalid data found"):
        await service.generate_thumbnail(codec, request, settings)
    [command] = stub_codec.invocations()
    assert "-ss 1" in command


@pytest.mark.asyncio
async def test_seek_past_end_error_falls_back_to_first_frame(
    codec: CodecSession, settings: Settings, stub_codec: StubCodec
) -> None:
    request = ThumbnailRequest(filename="a.mp4", content_type="video/mp4", data=b"PASTEND", width=10, height=10)
    result = await service.generate_thumbnail(codec, request, settings)
    assert result.data == STUB_JPEG
    first, second = stub_codec.invocations()
    assert "-ss 1" in first
    assert "-ss" not in second
