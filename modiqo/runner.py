"""Run the dex binary as a subprocess and capture its output."""

from __future__ import annotations

import asyncio
import logging
import os
import re
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from modiqo.config import DexSettings, load_settings

logger = logging.getLogger("modiqo.runner")

ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[\??[0-9;]*[a-zA-Z]")


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_PATTERN.sub("", text)


@dataclass
class CommandOutput:
    """Captured result of a successful dex invocation."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float

    @property
    def text(self) -> str:
        """Trimmed stdout, or trimmed stderr when stdout is empty."""

        out = self.stdout.strip()
        return out if out else self.stderr.strip()


class DexCommandError(RuntimeError):
    """Raised when dex cannot be run, times out, overflows or exits non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None, stdout: str = "", stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class DexRunner:
    """Execute dex commands with a wall-clock timeout and an output cap."""

    def __init__(self, settings: DexSettings | None = None):
        self.settings = settings or load_settings()

    async def run(
        self,
        args: Sequence[str],
        *,
        timeout_seconds: int | None = None,
        input_text: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandOutput:
        command = [self.settings.executable, *args]
        timeout = timeout_seconds or self.settings.timeout_seconds
        label = " ".join(["dex", *args])
        start_time = time.monotonic()

        logger.debug("Executing dex command: %s (timeout %ss)", " ".join(command), timeout)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=self.settings.max_output_bytes,
                env=self._build_environment(env),
            )
        except OSError as exc:
            raise DexCommandError(f"{label} failed to start: {exc}") from exc

        payload = input_text.encode("utf-8") if input_text is not None else None
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(payload), timeout=timeout)
        except asyncio.TimeoutError as exc:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.communicate()
            raise DexCommandError(f"{label} timed out after {timeout} seconds") from exc

        duration = time.monotonic() - start_time
        return_code = process.returncode
        stdout_text = self._decode(stdout_bytes)
        stderr_text = self._decode(stderr_bytes)

        limit = self.settings.max_output_bytes
        if len(stdout_bytes or b"") > limit or len(stderr_bytes or b"") > limit:
            raise DexCommandError(
                f"{label} produced more than {limit} bytes of output",
                returncode=return_code,
            )

        if return_code != 0:
            raise DexCommandError(
                f"{label} exited with status {return_code}",
                returncode=return_code,
                stdout=stdout_text,
                stderr=stderr_text,
            )

        logger.debug("%s finished in %.2fs", label, duration)
        return CommandOutput(
            args=list(args),
            returncode=return_code,
            stdout=stdout_text,
            stderr=stderr_text,
            duration_seconds=duration,
        )

    def _decode(self, data: bytes | None) -> str:
        text = (data or b"").decode("utf-8", errors="replace")
        return strip_ansi(text) if self.settings.strip_ansi else text

    def _build_environment(self, overrides: Mapping[str, str] | None) -> dict[str, str]:
        env = os.environ.copy()
        env.update(self.settings.env)
        if overrides:
            env.update(overrides)
        return env
