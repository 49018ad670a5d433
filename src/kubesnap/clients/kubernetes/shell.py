"""Async execution of external commands."""

import asyncio
from typing import Dict, List, Optional
import structlog

from kubesnap.core.exceptions import CommandExecutionException

logger = structlog.get_logger(__name__)


async def execute(args: List[str], env: Optional[Dict[str, str]] = None) -> str:
    """Run a command and return its stdout.

    A non-zero exit raises CommandExecutionException carrying stderr (or
    stdout when stderr is empty). Cancelling the awaiting task kills the
    child process.
    """
    command = " ".join(args)
    logger.debug("Executing command", command=command)

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env
        )
    except OSError as e:
        raise CommandExecutionException(args, None, str(e))

    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        logger.debug("Command cancelled", command=command)
        raise

    output = stdout.decode("utf-8", errors="replace")
    errors = stderr.decode("utf-8", errors="replace")

    if process.returncode != 0:
        logger.debug("Command failed", command=command, returncode=process.returncode, output=errors or output)
        raise CommandExecutionException(args, process.returncode, errors or output)

    logger.debug("Command succeeded", command=command, bytes=len(output))
    return output
