"""
Process-wide codec session.

One ``CodecSession`` per process, created lazily by ``get_codec_session()``.
It moves through ``UNINITIALIZED → INITIALIZING → READY`` exactly once:
``ensure_ready()`` resolves the ffmpeg executable, probes it and creates the
private workspace, guarded by a lock so concurrent first requests initialize
it a single time.

Every transcode stages its files through ``artifacts()``, which hands out
uuid-named paths inside the workspace and removes them on every exit path.
The number of simultaneous codec processes is bounded by a semaphore sized
from ``max_concurrent_transcodes``.
"""
from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import shutil
import tempfile
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path

from thumbnailer.codec.commands import GLOBAL_ARGS
from thumbnailer.codec.errors import (
    CodecExecutionError,
    CodecTimeout,
    CodecUnavailable,
    CodecWorkspaceError,
)
from thumbnailer.codec.loader import locate_codec_binary
from thumbnailer.config import Settings, get_settings

logger = logging.getLogger(__name__)

_PROBE_TIMEOUT = 15.0
_STDERR_TAIL_LINES = 20


class CodecState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass(frozen=True)
class Artifacts:
    """Request-scoped input/output paths inside the workspace."""
    input: Path
    output: Path


class CodecSession:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._state = CodecState.UNINITIALIZED
        self._init_lock = asyncio.Lock()
        self._slots = asyncio.Semaphore(settings.max_concurrent_transcodes)
        self._executable: Path | None = None
        self._workspace: Path | None = None
        self.version: str | None = None

    @property
    def state(self) -> CodecState:
        return self._state

    @property
    def workspace(self) -> Path | None:
        return self._workspace

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def ensure_ready(self) -> None:
        """Initialize the session once. Cheap no-op after the first success."""
        if self._state is CodecState.READY:
            return
        async with self._init_lock:
            if self._state is CodecState.READY:
                return
            self._state = CodecState.INITIALIZING
            ready = False
            try:
                executable = await locate_codec_binary(self._settings)
                version = await self._probe(executable)
                workspace = await asyncio.to_thread(self._create_workspace)
                ready = True
            finally:
                # A failed attempt never reached READY; the next request retries it.
                if not ready:
                    self._state = CodecState.UNINITIALIZED

            self._executable = executable
            self._workspace = workspace
            self.version = version
            self._state = CodecState.READY
            logger.info("Codec engine ready: %s (workspace %s)", version, workspace)

    async def shutdown(self) -> None:
        """Drop the workspace at process exit."""
        async with self._init_lock:
            if self._workspace is not None:
                shutil.rmtree(self._workspace, ignore_errors=True)
                logger.info("Codec workspace %s removed", self._workspace)
            self._workspace = None
            self._executable = None
            self._state = CodecState.UNINITIALIZED

    async def _probe(self, executable: Path) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                str(executable), "-version",
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await asyncio.wait_for(proc.communicate(), _PROBE_TIMEOUT)
        except (OSError, asyncio.TimeoutError) as exc:
            raise CodecUnavailable(f"could not start codec executable {executable}: {exc}") from exc

        if proc.returncode != 0:
            raise CodecUnavailable(
                f"codec executable {executable} failed its version probe: "
                f"{stderr.decode(errors='replace').strip()}"
            )
        lines = stdout.decode(errors="replace").splitlines()
        return lines[0].strip() if lines else str(executable)

    def _create_workspace(self) -> Path:
        root = Path(self._settings.workspace_dir).expanduser() if self._settings.workspace_dir else None
        try:
            if root is not None:
                root.mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix="thumbnailer-", dir=root))
        except OSError as exc:
            raise CodecWorkspaceError(f"could not create codec workspace: {exc}") from exc

    def _require_ready(self) -> tuple[Path, Path]:
        if self._state is not CodecState.READY or self._executable is None or self._workspace is None:
            raise CodecUnavailable("codec session is not initialized")
        return self._executable, self._workspace

    # ── Workspace ────────────────────────────────────────────────────────────

    @contextlib.asynccontextmanager
    async def artifacts(self, extension: str) -> AsyncIterator[Artifacts]:
        """Reserve uniquely named input/output paths; both are deleted on exit."""
        _, workspace = self._require_ready()
        stem = uuid.uuid4().hex
        staged = Artifacts(
            input=workspace / f"{stem}.{extension}",
            output=workspace / f"{stem}.jpg",
        )
        try:
            yield staged
        finally:
            for path in (staged.input, staged.output):
                try:
                    path.unlink(missing_ok=True)
                except OSError:
                    logger.warning("Could not remove workspace artifact %s", path, exc_info=True)

    async def write_artifact(self, path: Path, data: bytes) -> None:
        try:
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as exc:
            raise CodecWorkspaceError(f"could not stage input: {exc}") from exc

    async def read_artifact(self, path: Path) -> bytes | None:
        """Return the artifact's bytes, or ``None`` when the codec did not write it."""
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CodecWorkspaceError(f"could not read output: {exc}") from exc

    # ── Execution ────────────────────────────────────────────────────────────

    async def execute(self, args: list[str]) -> None:
        """Run one codec command inside the workspace. Never retried."""
        executable, workspace = self._require_ready()
        timeout = self._settings.transcode_timeout_seconds

        async with self._slots:
            try:
                proc = await asyncio.create_subprocess_exec(
                    str(executable), *GLOBAL_ARGS, *args,
                    cwd=workspace,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise CodecUnavailable(f"could not start codec: {exc}") from exc

            try:
                _, stderr = await asyncio.wait_for(proc.communicate(), timeout)
            except asyncio.TimeoutError:
                raise CodecTimeout(timeout) from None
            finally:
                if proc.returncode is None:
                    with contextlib.suppress(ProcessLookupError):
                        proc.kill()
                    await proc.wait()

        lines = stderr.decode(errors="replace").splitlines()
        for line in lines:
            logger.debug("ffmpeg: %s", line)
        if proc.returncode != 0:
            raise CodecExecutionError(proc.returncode, "\n".join(lines[-_STDERR_TAIL_LINES:]))


_session: CodecSession | None = None


def get_codec_session() -> CodecSession:
    """Return the process-wide session, creating (not initializing) it on first call."""
    global _session
    if _session is None:
        _session = CodecSession(get_settings())
    return _session


async def shutdown_codec_session() -> None:
    if _session is not None:
        await _session.shutdown()
