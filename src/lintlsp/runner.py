"""
Run the configured lint command for one document.

The command string goes through the platform shell (``sh -c`` or
``cmd /c``) so users can write pipes and redirections.  stdout and stderr
are captured together: lint tools disagree on which stream they report on.
"""
from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import sys
from dataclasses import dataclass

from lintlsp.config import Configuration
from lintlsp.document import Document
from lintlsp.errors import LintTimeoutError

logger = logging.getLogger(__name__)

# Replaced with the quoted path of the document being linted.
INPUT_PLACEHOLDER = '${INPUT}'


@dataclass(frozen=True)
class LintResult:
    returncode: int
    output: str

    @property
    def succeeded(self) -> bool:
        """A zero exit status means the tool found nothing to report."""
        return self.returncode == 0


def shell_command(command: str) -> list[str]:
    """Return the argv that runs *command* through the platform shell."""
    if sys.platform == 'win32':
        return ['cmd', '/c', command]
    return ['sh', '-c', command]


def expand_command(command: str, path: str) -> str:
    if INPUT_PLACEHOLDER not in command:
        return command
    quoted = subprocess.list2cmdline([path]) if sys.platform == 'win32' else shlex.quote(path)
    return command.replace(INPUT_PLACEHOLDER, quoted)


def _kill_tree(proc: subprocess.Popen) -> None:
    """Kill *proc* and everything the shell started under it."""
    if sys.platform == 'win32':
        subprocess.run(['taskkill', '/F', '/T', '/PID', str(proc.pid)],
                       stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_lint(document: Document, config: Configuration, path: str = '') -> LintResult | None:
    """Run the lint command for *document* and return its combined output.

    Returns ``None`` when *config* has no command.  Raises
    :class:`LintTimeoutError` if the process outlives ``config.lint_timeout``;
    the shell and every process it started are killed first.
    """
    if not config.lint_command:
        return None

    command = expand_command(config.lint_command, path)
    stdin_text = document.text.encode('utf-8') if config.lint_stdin else None
    logger.debug('run_lint: %s → %r (stdin=%s)', document.uri, command, config.lint_stdin)

    # The shell gets its own process group so a timeout can reach the tool itself.
    if sys.platform == 'win32':
        group = {'creationflags': subprocess.CREATE_NEW_PROCESS_GROUP}
    else:
        group = {'start_new_session': True}

    try:
        proc = subprocess.Popen(
            shell_command(command),
            stdin=subprocess.PIPE if config.lint_stdin else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            **group,
        )
    except OSError as e:
        logger.error('run_lint: could not start %r: %s', command, e)
        return LintResult(returncode=-1, output='')

    with proc:
        try:
            stdout, _ = proc.communicate(stdin_text, timeout=config.lint_timeout)
        except subprocess.TimeoutExpired as e:
            _kill_tree(proc)
            proc.wait()
            raise LintTimeoutError(command, config.lint_timeout) from e

    output = stdout.decode('utf-8', errors='replace')
    if proc.returncode == 0:
        logger.debug('run_lint: %s succeeded', document.uri)
    else:
        logger.debug('run_lint: %s exited %d with %d bytes of output',
                     document.uri, proc.returncode, len(stdout))
    return LintResult(returncode=proc.returncode, output=output)
