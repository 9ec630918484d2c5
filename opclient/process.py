"""
op subprocess plumbing — argv construction and one-shot process execution.

The exit status of op is not interpreted here; success and failure are both
carried in stdout and sorted out by opclient.response.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from opclient.errors import CommandTimeoutError, SpawnError
from opclient.models import Session, Vault
from opclient.session import require_valid

logger = logging.getLogger(__name__)

_SECRET_FLAGS = ("--session=",)


def build_command(
    command: str,
    *args: str,
    session: Session | None = None,
    vault: Vault | None = None,
) -> list[str]:
    """Turn a logical op command into an argv (without the executable).

    ``command`` is split on whitespace; ``args`` are appended as-is so values
    containing spaces survive. The session gate runs here, before a token is
    ever attached.
    """
    argv = command.split()
    argv.extend(args)

    if session is not None:
        require_valid(session)
        argv.append(f"--session={session.token}")

    if vault is not None:
        argv.append(f"--vault={vault.name}")

    return argv


def redact(argv: list[str]) -> list[str]:
    """Mask session tokens and sign-in secrets for logging."""
    if argv[:1] == ["signin"]:
        # signin <domain> <email> <secret key> <master password> [flags]
        return [a if i < 3 or (i > 4 and a.startswith("--")) else "***" for i, a in enumerate(argv)]
    out = []
    for arg in argv:
        for flag in _SECRET_FLAGS:
            if arg.startswith(flag):
                arg = f"{flag}***"
        out.append(arg)
    return out


async def run_binary(executable: Path | str, argv: list[str], timeout: float | None = None) -> str:
    """Run op once and return its trimmed stdout.

    Raises SpawnError if the process cannot be started and
    CommandTimeoutError if it outlives ``timeout`` seconds.
    """
    logger.debug("Spawning %s %s", executable, " ".join(redact(argv)))
    try:
        proc = await asyncio.create_subprocess_exec(
            str(executable),
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise SpawnError(f"Failed to start {executable}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        logger.warning("%s %s timed out after %ss", executable, argv[:1], timeout)
        raise CommandTimeoutError(f"{executable} did not exit within {timeout}s") from None

    text = stdout.decode("utf-8", errors="replace").strip()
    if stderr:
        logger.debug("op stderr: %s", stderr.decode("utf-8", errors="replace").strip())
    if proc.returncode and not text:
        logger.warning("%s exited with %s and no output", executable, proc.returncode)
    else:
        logger.debug("op exited with %s (%d bytes)", proc.returncode, len(text))
    return text
