import stat
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from thumbnailer.codec.session import CodecSession, get_codec_session
from thumbnailer.config import Settings, get_settings
from thumbnailer.main import app
from thumbnailer.rate_limit import limiter

STUB_JPEG = b"\xff\xd8stub-jpeg\xff\xd9"

# Minimal stand-in for ffmpeg. Behaviour is driven by the first bytes of the
# staged input:
#   CORRUPT… → decoder error on stderr, exit 1
#   SLOW…    → hangs long enough to hit the transcode timeout
#   SHORT…   → writes nothing when asked to seek (clip shorter than the offset)
#   PASTEND… → fails with "nothing was encoded" when asked to seek
# anything else produces STUB_JPEG at the output path (the last argument).
_STUB_SCRIPT = """#!/bin/sh
if [ "$1" = "-version" ]; then
  echo "version" >> "{log}"
  echo "ffmpeg version 6.1-stub Copyright (c) the FFmpeg developers"
  exit 0
fi
echo "$*" >> "{log}"
input=""
seek=""
prev=""
for arg in "$@"; do
  if [ "$prev" = "-i" ]; then input="$arg"; fi
  if [ "$arg" = "-ss" ]; then seek="yes"; fi
  prev="$arg"
  output="$arg"
done
head=$(head -c 7 "$input")
case "$head" in
  CORRUPT*)
    echo "$input: Invalid data found when processing input" >&2
    exit 1
    ;;
  SLOW*)
    exec sleep 5
    ;;
  PASTEND*)
    if [ -n "$seek" ]; then
      echo "Output file is empty, nothing was encoded" >&2
      exit 1
    fi
    ;;
  SHORT*)
    if [ -n "$seek" ]; then exit 0; fi
    ;;
esac
printf '\\377\\330stub-jpeg\\377\\331' > "$output"
"""


@dataclass
class StubCodec:
    executable: Path
    log: Path

    def invocations(self) -> list[str]:
        """Command lines the stub was run with, excluding version probes."""
        if not self.log.exists():
            return []
        return [line for line in self.log.read_text().splitlines() if line != "version"]

    def probes(self) -> int:
        if not self.log.exists():
            return 0
        return self.log.read_text().splitlines().count("version")


@pytest.fixture
def stub_codec(tmp_path: Path) -> StubCodec:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    log = tmp_path / "codec.log"
    executable = bin_dir / "ffmpeg"
    executable.write_text(_STUB_SCRIPT.format(log=log))
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return StubCodec(executable=executable, log=log)


@pytest.fixture
def settings(tmp_path: Path, stub_codec: StubCodec) -> Settings:
    return Settings(
        _env_file=None,
        ffmpeg_path=str(stub_codec.executable),
        workspace_dir=str(tmp_path / "workspace"),
        transcode_timeout_seconds=2.0,
        rate_limit_enabled=False,
    )


@pytest.fixture
def codec(settings: Settings) -> CodecSession:
    return CodecSession(settings)


@pytest.fixture
def client(settings: Settings, codec: CodecSession) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_codec_session] = lambda: codec
    limiter_enabled = limiter.enabled
    limiter.enabled = False
    try:
        with TestClient(app) as c:
            yield c
    finally:
        limiter.enabled = limiter_enabled
        app.dependency_overrides.clear()
