"""Scanner for ``winget upgrade`` output.

Every row of the upgrade table must carry both the installed and the
available version, so rows need at least four columns.
"""

import logging
from typing import Optional

from upgrade_advisor.models import DEFAULT_SOURCE, PackageRecord
from upgrade_advisor.scanners.base import BaseScanner, find_source, looks_like_source

logger = logging.getLogger(__name__)


class UpgradableScanner(BaseScanner):
    """Scanner for packages with an available upgrade.

    When the fourth field looks like a source tag it is taken as the source
    and the fifth field as the available version. Rows without a fifth
    field in that situation are discarded.
    """

    min_fields = 4

    @property
    def mode_name(self) -> str:
        """Return the scan mode name.

        Returns:
            The string "upgradable".
        """
        return "upgradable"

    def _parse_fields(self, fields: list[str]) -> Optional[PackageRecord]:
        name, package_id, current = fields[0], fields[1], fields[2]
        if looks_like_source(fields[3]):
            if len(fields) < 5:
                logger.debug("No available version for %s, only a source tag", package_id)
                return None
            source = fields[3]
            available = fields[4]
        else:
            available = fields[3]
            source = find_source(fields[4:]) or DEFAULT_SOURCE

        return PackageRecord(
            name=name,
            id=package_id,
            current_version=current,
            available_version=available,
            source=source,
        )
