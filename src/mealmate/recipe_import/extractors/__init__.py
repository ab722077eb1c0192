"""HTML extraction tiers, tried in priority order."""

import logging
from typing import Sequence

from ..models import RecipeDraft
from .base import ExtractionTier
from .generic import GenericTier
from .json_ld import JsonLdTier
from .microdata import MicrodataTier
from .site_specific import (
    SITE_CONFIGS,
    STRUCTURED_DATA_DOMAINS,
    SiteConfig,
    SiteRegistry,
    SiteSelectors,
    SiteSpecificTier,
)

logger = logging.getLogger(__name__)


def default_tiers(registry: SiteRegistry | None = None) -> list[ExtractionTier]:
    """JSON-LD, then microdata, then site selectors, then generic heuristics."""
    return [
        JsonLdTier(),
        MicrodataTier(),
        SiteSpecificTier(registry),
        GenericTier(),
    ]


def run_tiers(tiers: Sequence[ExtractionTier], html: str, page_url: str) -> RecipeDraft | None:
    """
    Return the draft from the first tier that produces one.

    Later tiers are not consulted once a tier succeeds. A tier that raises
    is logged and treated as having found nothing.
    """
    for tier in tiers:
        try:
            draft = tier.try_extract(html, page_url)
        except Exception:
            logger.warning(f"{tier.name} tier failed on {page_url}", exc_info=True)
            continue
        if draft is not None:
            logger.info(f"{tier.name} extraction succeeded for {page_url}")
            return draft
        logger.debug(f"{tier.name} tier found no recipe on {page_url}")
    return None


__all__ = [
    "ExtractionTier",
    "GenericTier",
    "JsonLdTier",
    "MicrodataTier",
    "SITE_CONFIGS",
    "STRUCTURED_DATA_DOMAINS",
    "SiteConfig",
    "SiteRegistry",
    "SiteSelectors",
    "SiteSpecificTier",
    "default_tiers",
    "run_tiers",
]
