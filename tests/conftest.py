"""Pytest configuration and fixtures."""

import asyncio
from typing import Optional

import pytest

from upgrade_advisor.models import PackageRecord
from upgrade_advisor.providers.base import BaseProvider

WINGET_LIST_OUTPUT = (
    "\x1b[2K   ██████████████▒▒▒▒▒▒  1024 KB / 2.00 MB\r\n"
    "Name                 Id                            Version       Available  Source\r\n"
    "------------------------------------------------------------------------------------\r\n"
    "7-Zip 22.01 (x64)    7zip.7zip                     22.01         23.01      winget\r\n"
    "Git                  Git.Git                       2.43.0                   winget\r\n"
    "Windows Calculator   Microsoft.WindowsCalculator   11.2210.0.0              msstore\r\n"
    "Microsoft Edge       Microsoft.Edge                118.0.2088.76\r\n"
)

WINGET_UPGRADE_OUTPUT = (
    "\x1b[?25l   - \x1b[?25h\r\n"
    "Name                 Id                 Version     Available   Source\r\n"
    "------------------------------------------------------------------------\r\n"
    "7-Zip 22.01 (x64)    7zip.7zip          22.01       23.01       winget\r\n"
    "Git                  Git.Git            2.43.0      2.44.0      winget\r\n"
    "Foo                  Foo.Id             1.0         winget\r\n"
    "3 upgrades available.\r\n"
    "\r\n"
    "The following packages have an upgrade available, but require explicit targeting for upgrade:\r\n"
    "Name                 Id                 Version     Available   Source\r\n"
    "------------------------------------------------------------------------\r\n"
    "Discord              Discord.Discord    1.0.9013    1.0.9015    winget\r\n"
)


@pytest.fixture
def winget_list_output() -> str:
    """Raw `winget list` output including progress noise."""
    return WINGET_LIST_OUTPUT


@pytest.fixture
def winget_upgrade_output() -> str:
    """Raw `winget upgrade` output with a second, explicit-targeting table."""
    return WINGET_UPGRADE_OUTPUT


@pytest.fixture
def sample_packages() -> list[PackageRecord]:
    """Three upgradable packages."""
    return [
        PackageRecord(
            name="7-Zip",
            id="7zip.7zip",
            current_version="22.01",
            available_version="23.01",
        ),
        PackageRecord(
            name="Git",
            id="Git.Git",
            current_version="2.43.0",
            available_version="2.44.0",
        ),
        PackageRecord(
            name="Discord",
            id="Discord.Discord",
            current_version="1.0.9013",
            available_version="1.0.9015",
        ),
    ]


class FakeProvider(BaseProvider):
    """In-memory provider that records how it was called.

    Attributes:
        responses: Analysis text by package id.
        delays: Seconds to sleep by package id.
        errors: Exception to raise by package id.
        started: Package ids in the order their analysis started.
        max_in_flight: Highest number of overlapping calls observed.
    """

    def __init__(self) -> None:
        self.responses: dict[str, str] = {}
        self.delays: dict[str, float] = {}
        self.errors: dict[str, Exception] = {}
        self.started: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    @property
    def name(self) -> str:
        return "Fake"

    async def request(
        self,
        prompt: str,
        credentials: Optional[str],
        model: Optional[str] = None,
    ) -> str:
        return "analysis" if credentials else ""

    async def analyze(
        self,
        package: PackageRecord,
        credentials: Optional[str],
        model: Optional[str] = None,
    ) -> str:
        self.started.append(package.id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(package.id, 0.01))
            if package.id in self.errors:
                raise self.errors[package.id]
            if not credentials:
                return ""
            return self.responses.get(
                package.id,
                f"### 🎯 **Executive Summary**\n> 🟢 RECOMMENDED\n\nUpgrade {package.name}.",
            )
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Return a FakeProvider with default responses."""
    return FakeProvider()
