"""
Runs Python snippets in a subprocess with a timeout.
"""

import asyncio
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

from devtask.config import CODE_EXECUTION_TIMEOUT
from devtask.utils.logging import logger

MAX_OUTPUT = 10000


@dataclass
class ExecutionResult:
    """Output of a snippet run."""

    success: bool
    stdout: str
    stderr: str
    exit_code: int | None = None
    timed_out: bool = False

    @property
    def output(self) -> str:
        return self.stdout or self.stderr


def _truncate(text: str) -> str:
    if len(text) > MAX_OUTPUT:
        return text[:MAX_OUTPUT] + "\n... (saída truncada)"
    return text


async def execute_code(code: str, timeout: int = CODE_EXECUTION_TIMEOUT) -> ExecutionResult:
    """Write `code` to a temporary directory and run it with the current interpreter."""
    tmp_dir = Path(tempfile.mkdtemp(prefix="devtask-code-"))
    script = tmp_dir / "snippet.py"
    script.write_text(code, encoding="utf-8")

    try:
        logger.info(f"Executing snippet ({len(code)} chars)")
        process = await asyncio.create_subprocess_exec(
            sys.executable,
            str(script),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(tmp_dir),
        )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.warning(f"Snippet timed out after {timeout} seconds")
            return ExecutionResult(
                success=False,
                stdout="",
                stderr=f"Tempo limite de {timeout} segundos excedido.",
                timed_out=True,
            )

        return ExecutionResult(
            success=process.returncode == 0,
            stdout=_truncate(stdout.decode("utf-8", errors="replace")),
            stderr=_truncate(stderr.decode("utf-8", errors="replace")),
            exit_code=process.returncode,
        )
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
