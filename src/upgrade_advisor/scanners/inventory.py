"""Scanner for ``winget list`` output.

The inventory table has the columns Name, Id, Version, Available and
Source, but Available and Source are both optional per row.
"""

from typing import Optional

from upgrade_advisor.models import DEFAULT_SOURCE, PackageRecord
from upgrade_advisor.scanners.base import BaseScanner, looks_like_source


class InventoryScanner(BaseScanner):
    """Scanner for installed-package listings.

    Example input::

        Name        Id                 Version   Available  Source
        ---------------------------------------------------------
        7-Zip       7-Zip.7-Zip        22.01     23.01      winget
        Git         Git.Git            2.43.0               winget
        Calculator  9WZDNCRFHVN5       11.2210   msstore
    """

    min_fields = 3

    @property
    def mode_name(self) -> str:
        """Return the scan mode name.

        Returns:
            The string "inventory".
        """
        return "inventory"

    def _parse_fields(self, fields: list[str]) -> Optional[PackageRecord]:
        name, package_id, version = fields[0], fields[1], fields[2]
        available = ""
        source = DEFAULT_SOURCE

        extra = fields[3:]
        for offset, field in enumerate(extra):
            if looks_like_source(field):
                source = field
                # A version sitting before the source is the Available column
                if offset == 1:
                    available = extra[0]
                break
        else:
            if len(fields) == 4:
                source = fields[3]

        return PackageRecord(
            name=name,
            id=package_id,
            current_version=version,
            available_version=available,
            source=source,
        )
