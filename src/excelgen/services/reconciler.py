from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable, Sequence

from ..models.header_column import CellType, HeaderColumn

"""Schema reconciliation service.

Merges freshly read column titles into a previously stored schema:
- retained titles keep the type assigned earlier
- new titles get CellType.UNDEFINED pending manual assignment
- columns that disappeared from the sheet are dropped

Column order of the result: retained columns first, then newly added ones,
each group in the order the titles appear in the sheet.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "EmptySheetWarning",
    "reconcile",
]


class EmptySheetWarning(UserWarning):
    """Emitted when a worksheet yields no column titles."""


def _unique_titles(titles: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for t in titles:
        if t in seen:
            logger.warning(f"duplicate column title ignored: {t}")
            continue
        seen.add(t)
        result.append(t)
    return result


def reconcile(
    existing_columns: Sequence[HeaderColumn],
    fresh_titles: Iterable[str],
    force_reset: bool = False,
) -> list[HeaderColumn]:
    """Reconcile stored header columns against freshly read titles.

    Args:
        existing_columns: Previously stored schema (not modified)
        fresh_titles: Column titles read from the worksheet, in sheet order
        force_reset: Discard prior type assignments (reimport)

    Returns:
        New ordered list of HeaderColumn

    Warns:
        EmptySheetWarning: If ``fresh_titles`` is empty. An empty list is
            still returned so the caller may proceed with an empty schema.
    """
    titles = _unique_titles(fresh_titles)
    if not titles:
        warnings.warn("worksheet has no column titles", EmptySheetWarning, stacklevel=2)
        return []

    # 初回インポート / 再インポート: 全列 Undefined
    if force_reset or not existing_columns:
        return [HeaderColumn(name=t) for t in titles]

    known = {c.name: c.type for c in existing_columns}
    retained = [HeaderColumn(name=t, type=known[t]) for t in titles if t in known]
    added = [HeaderColumn(name=t, type=CellType.UNDEFINED) for t in titles if t not in known]

    fresh = set(titles)
    dropped = [c.name for c in existing_columns if c.name not in fresh]
    if dropped:
        logger.debug(f"dropped columns: {dropped}")
    if added:
        logger.debug(f"new columns: {[c.name for c in added]}")
    return retained + added
