from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from booking_engine.domain.pricing import PropertyPricingConfig


@dataclass(frozen=True)
class CatalogProperty:
    """
    Read-only snapshot of a property as supplied by the property catalog.

    Re-read on every request; nothing in the engine caches it.
    """

    id: int
    host_id: str
    max_guests: int
    pricing: PropertyPricingConfig
    title: Optional[str] = None
    is_active: bool = True
