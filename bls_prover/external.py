"""
Synchronous boundary to external tools (node, snarkjs).

``run_tool`` is the only place in the package that spawns a process. It
always applies a timeout and turns every failure mode (missing executable,
non-zero exit, timeout) into an ExternalToolError carrying the captured
stderr, so callers never see raw ``subprocess`` or ``OSError`` exceptions.
"""

from __future__ import annotations

import subprocess
import time
from pathlib import Path
from typing import Optional, Sequence, Union

from .errors import ExternalToolError
from .logging import get_logger

log = get_logger(__name__)


def _text(data: Union[bytes, str, None]) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", "replace")
    return data


def run_tool(
    argv: Sequence[str],
    *,
    timeout: float,
    cwd: Optional[Union[str, Path]] = None,
) -> subprocess.CompletedProcess:
    """Run ``argv`` and return the completed process (text mode, output captured)."""
    if not argv:
        raise ValueError("argv must not be empty")
    tool = Path(argv[0]).name
    started = time.perf_counter()
    try:
        proc = subprocess.run(
            list(argv),
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise ExternalToolError(f"{tool} not found", tool=tool, stderr=str(e), cause=e) from e
    except subprocess.TimeoutExpired as e:
        raise ExternalToolError(
            f"{tool} timed out after {timeout:g}s", tool=tool, stderr=_text(e.stderr), cause=e
        ) from e
    except OSError as e:
        raise ExternalToolError(f"{tool} could not be started", tool=tool, stderr=str(e), cause=e) from e

    elapsed_ms = (time.perf_counter() - started) * 1000.0
    if proc.returncode != 0:
        raise ExternalToolError(
            f"{tool} exited with status {proc.returncode}",
            tool=tool,
            returncode=proc.returncode,
            stderr=proc.stderr or proc.stdout or "",
            stdout=proc.stdout or "",
        )
    log.debug("external tool finished", extra={"tool": tool, "elapsed_ms": round(elapsed_ms, 1)})
    return proc


__all__ = ["run_tool"]
