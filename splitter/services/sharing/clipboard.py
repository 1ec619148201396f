"""
Clipboard Writers

Copying a share link is the one asynchronous boundary of the splitter.
It may fail for reasons unrelated to the ledger (no display, command not
installed, permission denied). Writers raise ClipboardError; the session
reports that as a plain False and never retries.
"""

import asyncio
import inspect
import shlex
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Union


class ClipboardError(Exception):
    """Text could not be placed on the clipboard."""
    pass


class ClipboardWriter(ABC):
    """Abstract interface for putting text on a clipboard."""

    @abstractmethod
    async def write_text(self, text: str) -> None:
        """
        Place text on the clipboard.

        Raises:
            ClipboardError: If the write fails
        """
        pass


class CommandClipboard(ClipboardWriter):
    """
    Pipes text into a system clipboard command.

    Typical commands: `pbcopy` (macOS), `xclip -selection clipboard` (X11),
    `wl-copy` (Wayland), `clip` (Windows).
    """

    def __init__(self, command: str, timeout: float = 5.0):
        self._argv = shlex.split(command)
        if not self._argv:
            raise ValueError("Clipboard command cannot be empty")
        self._timeout = timeout

    async def write_text(self, text: str) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *self._argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ClipboardError(f"Cannot run clipboard command {self._argv[0]!r}: {e}")

        try:
            _, stderr = await asyncio.wait_for(
                process.communicate(text.encode("utf-8")),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ClipboardError(f"Clipboard command {self._argv[0]!r} timed out")

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise ClipboardError(
                f"Clipboard command {self._argv[0]!r} exited with "
                f"{process.returncode}: {message or 'no output'}"
            )


class CallableClipboard(ClipboardWriter):
    """Adapts any sync or async `func(text)` into a ClipboardWriter."""

    def __init__(self, func: Callable[[str], Union[None, Awaitable[None]]]):
        self._func = func

    async def write_text(self, text: str) -> None:
        try:
            result = self._func(text)
            if inspect.isawaitable(result):
                await result
        except ClipboardError:
            raise
        except Exception as e:
            raise ClipboardError(f"Clipboard write failed: {e}")
