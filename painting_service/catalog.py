"""
catalog.py — Painting Style Catalog

Loads the selectable painting styles once per wizard. Rows are validated into
`PaintingStyle` records here; malformed or inactive rows never leave this module.
"""

import logging
from typing import List

import httpx
import pydantic

from .clients import CatalogClient
from .domain import PaintingStyle
from .errors import CatalogUnavailable

log = logging.getLogger(__name__)


def parse_style_rows(rows) -> List[PaintingStyle]:
    """
    Validates raw catalog rows, keeping catalog order.

    Rows that do not match the `PaintingStyle` shape are logged and skipped;
    rows flagged inactive are dropped.
    """
    if not isinstance(rows, list):
        raise CatalogUnavailable(f"Unexpected catalog response of type {type(rows).__name__}.")

    styles = []
    for index, row in enumerate(rows):
        try:
            style = PaintingStyle.model_validate(row)
        except pydantic.ValidationError as e:
            log.warning(f"Skipping malformed painting style row #{index}: {e.error_count()} error(s) - {row!r}")
            continue
        if style.is_active:
            styles.append(style)
    return styles


class StyleCatalog:
    """
    One-shot loader of the active painting styles.
    There is no automatic retry; a reload is a new call made by the user.
    """
    def __init__(self, client: CatalogClient):
        self.client = client

    async def load_active_styles(self) -> List[PaintingStyle]:
        """
        Fetches and validates the active styles.
        Returns:
            list[PaintingStyle]: Active styles in catalog order.
        Raises:
            CatalogUnavailable: If the catalog cannot be queried or answers garbage.
        """
        try:
            rows = await self.client.fetch_active_styles()
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogUnavailable(f"Painting styles could not be loaded: {e}")

        styles = parse_style_rows(rows)
        log.info(f"Loaded {len(styles)} active painting style(s).")
        return styles
