"""Validated execution of winget commands.

Commands arrive as plain strings (``winget <verb> [args...]``). Only
whitelisted verbs and flags are accepted, argument values are checked for
shell metacharacters, and the process is started without a shell. The
result is always text: command output, or a sentinel describing why
nothing was run.
"""

import logging
import re
import shlex
import subprocess
from typing import Optional

from upgrade_advisor.models import PackageRecord
from upgrade_advisor.scanners import ScanMode, parse

logger = logging.getLogger(__name__)

INVALID_COMMAND = "Invalid command format"
ERROR_PREFIX = "Error: "

ALLOWED_VERBS = frozenset(
    {"list", "upgrade", "install", "uninstall", "repair", "search", "source", "show"}
)

ALLOWED_FLAGS = frozenset(
    {
        "--id",
        "--source",
        "--verbose",
        "--accept-source-agreements",
        "--accept-package-agreements",
        "--silent",
        "--all",
        "--help",
        "--count",
        "--exact",
        "--query",
        "-q",
        "--include-unknown",
    }
)

ALLOWED_SOURCES = frozenset({"winget", "msstore", "all"})

# Shell metacharacters; arguments never pass through a shell but are rejected anyway
DANGEROUS_PATTERN = re.compile(r"[;&|><$`(){}\\\"'\r\n]")

PACKAGE_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+-]{0,127}$")

AGREEMENT_FLAGS = ["--accept-source-agreements", "--accept-package-agreements"]


def is_valid_command(verb: str, arguments: list[str]) -> bool:
    """Check a winget verb and its arguments against the whitelist.

    Args:
        verb: winget sub-command (e.g. "list").
        arguments: Remaining command-line arguments.

    Returns:
        True if the command may be executed.
    """
    if verb.lower() not in ALLOWED_VERBS:
        return False

    previous: Optional[str] = None
    for arg in arguments:
        if DANGEROUS_PATTERN.search(arg):
            return False

        if arg.startswith("-"):
            if arg.lower() not in ALLOWED_FLAGS:
                return False
        elif previous is not None and previous.startswith("-"):
            if not _is_valid_value(previous.lower(), arg):
                return False
        previous = arg

    return True


def _is_valid_value(flag: str, value: str) -> bool:
    if flag == "--id":
        return bool(PACKAGE_ID_PATTERN.match(value))
    if flag == "--source":
        return value.lower() in ALLOWED_SOURCES
    return len(value) <= 100


class CommandInvoker:
    """Runs whitelisted winget commands and returns their text output.

    The exit code is not reported separately: a failed run returns the
    combined stdout/stderr prefixed with ``Error: ``.

    Attributes:
        executable: Name or path of the winget binary.
        timeout: Seconds to wait for the process, or None for no limit.
    """

    def __init__(self, executable: str = "winget", timeout: Optional[float] = None) -> None:
        self.executable = executable
        self.timeout = timeout

    def invoke(self, command: str) -> str:
        """Run a command of the form ``winget <verb> [args...]``.

        Args:
            command: Full command line.

        Returns:
            The command output, INVALID_COMMAND for a rejected command, or a
            string starting with ``Error: `` if execution failed.
        """
        try:
            parts = shlex.split(command)
        except ValueError:
            return INVALID_COMMAND

        if len(parts) < 2 or parts[0].lower() not in ("winget", "winget.exe"):
            return INVALID_COMMAND

        verb, arguments = parts[1], parts[2:]
        if not is_valid_command(verb, arguments):
            logger.warning("Rejected winget command: %s", verb)
            return INVALID_COMMAND

        return self._run(verb, arguments)

    def _run(self, verb: str, arguments: list[str]) -> str:
        logger.debug("Executing winget %s with %d argument(s)", verb, len(arguments))
        try:
            completed = subprocess.run(
                [self.executable, verb, *arguments],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("winget %s failed to run: %s", verb, e)
            return f"{ERROR_PREFIX}{e}"

        logger.debug("winget %s exited with %d", verb, completed.returncode)
        if completed.returncode != 0:
            return f"{ERROR_PREFIX}{completed.stdout}\n{completed.stderr}".strip()
        return completed.stdout

    def list_installed(self, source: str = "all") -> list[PackageRecord]:
        """Scan installed packages."""
        output = self.invoke(self._with_source("winget list", source))
        return parse(output, ScanMode.INVENTORY)

    def list_upgradable(self, source: str = "all") -> list[PackageRecord]:
        """Scan packages that have an upgrade available."""
        output = self.invoke(self._with_source("winget upgrade", source))
        return parse(output, ScanMode.UPGRADABLE)

    def upgrade_package(self, package_id: str) -> tuple[bool, str]:
        """Upgrade a single package silently.

        Returns:
            (success, output) where success means the command ran and
            exited with status 0.
        """
        command = shlex.join(
            ["winget", "upgrade", "--id", package_id, *AGREEMENT_FLAGS, "--silent"]
        )
        output = self.invoke(command)
        success = output != INVALID_COMMAND and not output.startswith(ERROR_PREFIX)
        return success, output

    @staticmethod
    def _with_source(command: str, source: str) -> str:
        if source and source != "all":
            return f"{command} --source {shlex.quote(source)}"
        return command
