"""Runs the claude CLI as a subprocess.

One entry point, two modes: without an output callback the process is
run to completion and its output buffered; with one, stdout chunks are
delivered as they arrive while still being accumulated. Either way the
full stdout is parsed afterwards by parse_cli_output().
"""
from __future__ import annotations

import asyncio
import codecs
import json
import logging
import os
from collections.abc import Awaitable, Callable, Mapping, Sequence

from .errors import CommandExecutionError
from .models import (
    CommandResult,
    InvocationResult,
    ParsedOutput,
    StructuredOutput,
    UnstructuredOutput,
)

logger = logging.getLogger(__name__)

# Signature: async def on_output(chunk: str) -> None
OutputCallback = Callable[[str], Awaitable[None]]

_CHUNK_SIZE = 4096


def parse_cli_output(stdout: str) -> ParsedOutput:
    """Parse CLI stdout as a JSON object, falling back to plain text.

    Never raises: anything that is not a JSON object is unstructured.
    """
    try:
        data = json.loads(stdout)
    except (json.JSONDecodeError, ValueError):
        return UnstructuredOutput(text=stdout)
    if not isinstance(data, dict):
        return UnstructuredOutput(text=stdout)

    result = data.get("result")
    session_id = data.get("session_id")
    return StructuredOutput(
        data=data,
        result=result if isinstance(result, str) else None,
        session_id=session_id if isinstance(session_id, str) and session_id else None,
    )


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill *proc* if it is still running and reap it."""
    if proc.returncode is not None:
        return
    try:
        proc.kill()
    except ProcessLookupError:
        return
    await proc.wait()
    logger.info("Killed abandoned CLI process (pid=%s)", proc.pid)


class CommandExecutor:
    """Launches the CLI with array-based args (no shell)."""

    def __init__(self, command: str = "claude") -> None:
        self._command = command

    @property
    def command(self) -> str:
        return self._command

    @staticmethod
    def _build_env(env_override: Mapping[str, str] | None) -> dict[str, str] | None:
        """Inherited environment with *env_override* merged on top."""
        if not env_override:
            return None
        env = os.environ.copy()
        env.update(env_override)
        return env

    async def run(
        self,
        args: Sequence[str],
        *,
        env_override: Mapping[str, str] | None = None,
        on_output: OutputCallback | None = None,
    ) -> CommandResult:
        """Run the CLI with *args*.

        Streams stdout through *on_output* when given, otherwise buffers.
        Raises CommandExecutionError when the CLI cannot be started or
        exits non-zero. If the awaiting task is cancelled the subprocess
        is killed before the cancellation propagates.
        """
        logger.debug("Running %s %s", self._command, list(args))
        try:
            proc = await asyncio.create_subprocess_exec(
                self._command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._build_env(env_override),
            )
        except FileNotFoundError as exc:
            raise CommandExecutionError(
                self._command, f"'{self._command}' CLI not found"
            ) from exc
        except OSError as exc:
            raise CommandExecutionError(self._command, str(exc)) from exc

        try:
            if on_output is None:
                stdout_bytes, stderr_bytes = await proc.communicate()
                stdout = stdout_bytes.decode("utf-8", errors="replace")
                stderr = stderr_bytes.decode("utf-8", errors="replace")
            else:
                stdout, stderr = await self._stream(proc, on_output)
        except BaseException:
            # Cancelled or the output callback failed; do not leak the process.
            await _terminate(proc)
            raise

        returncode = proc.returncode if proc.returncode is not None else 0
        logger.debug("%s exited with rc=%s", self._command, returncode)
        if returncode != 0:
            logger.warning(
                "%s failed (rc=%s): %s",
                self._command, returncode, stderr.strip() or stdout.strip(),
            )
            raise CommandExecutionError(
                self._command,
                f"exited with code {returncode}: {stderr.strip() or stdout.strip()}",
                returncode=returncode,
                stdout=stdout,
                stderr=stderr,
            )
        return CommandResult(stdout=stdout, stderr=stderr, returncode=returncode)

    @staticmethod
    async def _stream(
        proc: asyncio.subprocess.Process,
        on_output: OutputCallback,
    ) -> tuple[str, str]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        parts: list[str] = []

        async def pump_stdout() -> None:
            while True:
                chunk = await proc.stdout.read(_CHUNK_SIZE)
                if not chunk:
                    break
                text = decoder.decode(chunk)
                if text:
                    parts.append(text)
                    await on_output(text)
            tail = decoder.decode(b"", final=True)
            if tail:
                parts.append(tail)
                await on_output(tail)

        _, stderr_bytes = await asyncio.gather(pump_stdout(), proc.stderr.read())
        await proc.wait()
        return "".join(parts), stderr_bytes.decode("utf-8", errors="replace")

    async def invoke(
        self,
        args: Sequence[str],
        *,
        env_override: Mapping[str, str] | None = None,
        on_output: OutputCallback | None = None,
    ) -> InvocationResult:
        """run() followed by parse_cli_output() on the captured stdout."""
        result = await self.run(args, env_override=env_override, on_output=on_output)
        return InvocationResult(
            command_result=result,
            parsed=parse_cli_output(result.stdout),
        )
