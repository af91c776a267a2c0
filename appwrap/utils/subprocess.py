import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from appwrap.errors import ExternalToolError


class SubprocessError(ExternalToolError):
    exit_code = 23

def split_command(command: Union[str, List[str]]) -> Union[str, List[str]]:
    if not isinstance(command, str):
        return command
    if os.name == "nt":
        # CreateProcess takes the command line as is
        return command
    return shlex.split(command)

def run_command(
    command: Union[str, List[str]],
    *,
    cwd: Optional[Path] = None,
    env: Optional[dict] = None,
    check: bool = True,
    capture_output: bool = True,
    text: bool = True,
) -> subprocess.CompletedProcess:
    args = split_command(command)
    if not args:
        raise SubprocessError("Empty command")

    try:
        result = subprocess.run(
            args,
            cwd=str(cwd) if cwd else None,
            env=env,
            check=False,  # handled manually
            capture_output=capture_output,
            text=text,
        )
    except FileNotFoundError as exc:
        raise SubprocessError(
            f"Command not found: {_program(args)}"
        ) from exc
    except OSError as exc:
        raise SubprocessError(
            f"Failed to execute command: {_display(args)}"
        ) from exc

    if check and result.returncode != 0:
        raise SubprocessError(
            _format_error(args, result)
        )

    return result

def _program(args: Union[str, List[str]]) -> str:
    if isinstance(args, str):
        return args.split(" ", 1)[0]
    return args[0]

def _display(args: Union[str, List[str]]) -> str:
    if isinstance(args, str):
        return args
    return shlex.join(args)

def _format_error(
    args: Union[str, List[str]],
    result: subprocess.CompletedProcess,
) -> str:
    message = [
        f"Command failed: {_display(args)}",
        f"Exit code: {result.returncode}",
    ]

    if result.stdout:
        message.append(f"stdout:\n{result.stdout.strip()}")

    if result.stderr:
        message.append(f"stderr:\n{result.stderr.strip()}")

    return "\n".join(message)
