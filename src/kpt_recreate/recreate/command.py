"""External command primitive used to run kpt."""
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from kpt_recreate.core.errors import CommandError

logger = logging.getLogger(__name__)


class Command(BaseModel):
    """A command line to run in a working directory."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Executable to run")
    args: List[str] = Field(default_factory=list)
    dir: Optional[Path] = Field(default=None, description="Working directory")

    @property
    def argv(self) -> List[str]:
        return [self.name, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


CommandRunner = Callable[[Command], str]


def run_command(command: Command) -> str:
    """Run a command synchronously and return its combined output.

    Blocks until the command exits; no timeout is applied.

    Raises:
        CommandError: If the command cannot be started or exits non-zero
    """
    try:
        result = subprocess.run(
            command.argv,
            cwd=command.dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        raise CommandError(f"failed to start {command}: {e}") from e

    output = result.stdout.strip()
    if result.returncode != 0:
        raise CommandError(
            f"command {command} exited with code {result.returncode}: {output}",
            output=output,
        )
    return output
