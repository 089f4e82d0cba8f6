from __future__ import annotations

import logging
import signal
import subprocess
from typing import Callable, Sequence

from .binder import BoundCommand, CommandLine
from .core import Settings
from .errors import ExecutionError
from .logging import get_logger


# exit status used when the shell itself cannot be started
EXIT_SPAWN_FAILED = 127


class Executor:
    """Runs bound commands one line at a time, strictly in plan order.

    Each line is handed to the configured shell as a separate child
    process that inherits stdin, stdout and stderr. The first failing line
    stops the run.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        echo: Callable[[str], None] | None = None,
        dry_run: bool = False,
    ):
        settings = settings or Settings()
        self.shell = tuple(settings.shell)
        self.cwd = settings.working_directory
        self.echo = echo
        self.dry_run = dry_run
        self.logger = get_logger("justly.executor")

    def run(self, commands: Sequence[BoundCommand]) -> int:
        """Execute ``commands`` and return 0, or raise ``ExecutionError``.

        The raised error's ``exit_code`` mirrors the failing child.
        """
        self.logger.info("Plan: %s", " → ".join(c.name for c in commands))
        for step, command in enumerate(commands, start=1):
            step_logger = get_logger(f"justly.recipe.{command.name}")
            step_logger.info("Run: %s (step %d/%d)", command.name, step, len(commands))
            for line in command.lines:
                self._run_line(step, command, line, step_logger)
        return 0

    def _run_line(
        self,
        step: int,
        command: BoundCommand,
        line: CommandLine,
        step_logger: logging.Logger,
    ) -> None:
        if self.echo and (self.dry_run or not line.quiet):
            self.echo(line.text)
        if self.dry_run:
            return
        exit_code, signum = self._spawn(line.text)
        if exit_code == 0:
            return
        if line.ignore_errors and signum is None:
            step_logger.warning("Ignoring exit code %d from: %s", exit_code, line.text)
            return
        step_logger.error(
            "Step %d (%s) failed with exit code %d", step, command.name, exit_code
        )
        raise ExecutionError(
            recipe=command.name,
            step=step,
            line=line.text,
            exit_code=exit_code,
            signal=signum,
        )

    def _spawn(self, text: str) -> tuple[int, int | None]:
        argv = [*self.shell, text]
        try:
            proc = subprocess.Popen(argv, cwd=self.cwd)
        except OSError as e:
            self.logger.error("Could not start %s: %s", argv[0], e)
            return EXIT_SPAWN_FAILED, None
        interrupted = False
        while True:
            try:
                returncode = proc.wait()
                break
            except KeyboardInterrupt:
                interrupted = True
                self.logger.warning("Interrupted, forwarding SIGINT to pid %d", proc.pid)
                proc.send_signal(signal.SIGINT)
        if returncode < 0:
            return 128 - returncode, -returncode
        if interrupted:
            # the plan stops here even if the child shrugged off the interrupt
            return returncode or 128 + signal.SIGINT, int(signal.SIGINT)
        return returncode, None
