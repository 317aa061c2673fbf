"""Scanners for winget table output.

This module provides scanners that turn the text printed by ``winget list``
and ``winget upgrade`` into package records.
"""

from enum import Enum
from typing import Optional

from upgrade_advisor.models import PackageRecord
from upgrade_advisor.scanners.base import KNOWN_SOURCES, BaseScanner, looks_like_source
from upgrade_advisor.scanners.inventory import InventoryScanner
from upgrade_advisor.scanners.upgradable import UpgradableScanner

__all__ = [
    "BaseScanner",
    "InventoryScanner",
    "KNOWN_SOURCES",
    "ScanMode",
    "UpgradableScanner",
    "get_scanner",
    "looks_like_source",
    "parse",
]


class ScanMode(Enum):
    """Which winget table is being parsed."""

    INVENTORY = "inventory"
    UPGRADABLE = "upgradable"


# Registry of scanners by mode
_SCANNERS: dict[ScanMode, type[BaseScanner]] = {
    ScanMode.INVENTORY: InventoryScanner,
    ScanMode.UPGRADABLE: UpgradableScanner,
}


def get_scanner(mode: ScanMode | str) -> BaseScanner:
    """Get the scanner for a scan mode.

    Args:
        mode: A ScanMode or its string value ("inventory", "upgradable").

    Returns:
        Scanner instance for the mode.

    Raises:
        ValueError: If the mode is not recognized.
    """
    try:
        mode = ScanMode(mode)
    except ValueError:
        raise ValueError(
            f"Unknown scan mode '{mode}'. "
            f"Supported modes: {', '.join(m.value for m in ScanMode)}"
        ) from None

    return _SCANNERS[mode]()


def parse(raw_text: Optional[str], mode: ScanMode | str) -> list[PackageRecord]:
    """Parse winget output with the scanner for the given mode."""
    return get_scanner(mode).parse(raw_text)
