"""
Speech Output.

Speaks text aloud through a local text-to-speech command, fire-and-forget.
Callers get no result and no error: missing engines and failures are
logged only.
"""

import asyncio
import shutil
from collections.abc import Sequence

from lingo.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

_ENGINES = ("espeak-ng", "espeak", "say")


def build_command(engine: str, text: str, language: str) -> list[str]:
    """Command line for a speech engine. Only espeak takes a voice."""
    if engine in ("espeak-ng", "espeak"):
        return [engine, "-v", language.lower(), text]
    return [engine, text]


class Speaker:
    """Fire-and-forget text-to-speech with a fixed language tag."""

    def __init__(self, language: str = "en-US", engines: Sequence[str] = _ENGINES) -> None:
        self.language = language
        self.engine = next((e for e in engines if shutil.which(e)), None)
        self._tasks: set[asyncio.Task] = set()

    def speak(self, text: str) -> None:
        if not text.strip():
            return
        if self.engine is None:
            log_with_source(logger, "internal", "warning", "No speech engine available")
            return
        task = asyncio.ensure_future(self._run(build_command(self.engine, text, self.language)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self) -> None:
        """Wait for utterances still playing (used before exit)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, command: list[str]) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await process.wait()
        except OSError as e:
            log_with_source(logger, "internal", "warning", "Speech failed", error=str(e))
