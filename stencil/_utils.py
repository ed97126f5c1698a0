from __future__ import annotations

import logging
import subprocess
from typing import Iterable, Literal

logger = logging.getLogger(__name__)


def run_logged(
    cmd: Iterable[str],
    *,
    check: bool = True,
    echo: Literal["always", "on_error", "never"] = "on_error",
    **kwargs: object,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess, mirroring its stdout/stderr into the log.
    Returns the CompletedProcess; raises CalledProcessError when check=True.
    """
    args = list(cmd)
    logger.debug(f"Running: {' '.join(args)}")
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        **kwargs,  # type: ignore[arg-type]
    )
    if echo == "always" or (echo == "on_error" and result.returncode != 0):
        level = logging.ERROR if result.returncode != 0 else logging.INFO
        for stream in (result.stdout, result.stderr):
            for line in stream.splitlines():
                logger.log(level, line)
    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, result.args, output=result.stdout, stderr=result.stderr
        )
    return result
