"""The one place where task commands meet the operating system shell."""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import sys

from taskboard.config import TaskSpec

logger = logging.getLogger(__name__)

POSIX = os.name == "posix"


def shell_argv(command: str) -> list[str]:
    bash = shutil.which("bash")
    if bash:
        return [bash, "-lc", command]
    return ["/bin/sh", "-c", command]


def spawn(spec: TaskSpec) -> subprocess.Popen[bytes]:
    env = {**os.environ, **spec.env} if spec.env else None
    common = dict(
        cwd=spec.working_dir or None,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    if POSIX:
        # own process group, so kill() reaches everything the shell started
        return subprocess.Popen(shell_argv(spec.command), start_new_session=True, **common)

    flags = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0) if sys.platform == "win32" else 0
    return subprocess.Popen(spec.command, shell=True, creationflags=flags, **common)


def kill(proc: subprocess.Popen[bytes]) -> None:
    if proc.poll() is not None:
        return

    if POSIX:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            logger.debug("killpg(%d) refused, killing the shell only", proc.pid)

    try:
        proc.kill()
    except ProcessLookupError:
        pass
