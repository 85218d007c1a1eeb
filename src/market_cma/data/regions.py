"""Determine which regions are selectable across all uploaded datasets."""

from collections.abc import Mapping, Sequence

import structlog

from .files import NATIONAL_REGION, REGION_COLUMN

logger = structlog.get_logger(__name__)


def region_names(records: Sequence[Mapping[str, str]]) -> set[str]:
    """Collect the non-empty region identifiers of one dataset."""
    return {name for name in (record.get(REGION_COLUMN) for record in records) if name}


def find_common_regions(datasets: Sequence[Sequence[Mapping[str, str]]]) -> list[str]:
    """Return the regions present in every dataset, sorted, excluding the national row.

    Identifiers must match exactly across files; no case or whitespace folding
    is applied, so a region spelled differently in one export drops out.
    """
    if not datasets:
        return []
    sets = [region_names(records) for records in datasets]
    common = set.intersection(*sets)
    common.discard(NATIONAL_REGION)
    logger.debug(
        "regions.intersected",
        datasets=len(datasets),
        per_dataset=[len(names) for names in sets],
        common=len(common),
    )
    return sorted(common)


__all__ = ["find_common_regions", "region_names"]
