"""Where the tax tables come from and how old they are.

The calculation core never looks tables up itself; the app resolves a
``TaxTableRecord`` once and passes its policy down.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict

from planner.config import settings
from planner.core.tax import SARS_2025_26, TaxPolicy

FALLBACK_SOURCE = "fallback"


class TaxTableRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    taxYear: str
    policy: TaxPolicy
    source: str
    retrievedAt: datetime

    def age(self, now: Optional[datetime] = None) -> timedelta:
        now = now or datetime.now(timezone.utc)
        return now - self.retrievedAt

    def is_stale(self, ttl_days: Optional[int] = None, now: Optional[datetime] = None) -> bool:
        ttl = settings.tax_table_ttl_days if ttl_days is None else ttl_days
        return self.age(now) > timedelta(days=ttl)


class FallbackTaxTableSource:
    """Serves the built-in 2025/26 tables, stamped when the source was created."""

    def __init__(self, policy: TaxPolicy = SARS_2025_26, retrieved_at: Optional[datetime] = None) -> None:
        self._record = TaxTableRecord(
            taxYear=policy.taxYear,
            policy=policy,
            source=FALLBACK_SOURCE,
            retrievedAt=retrieved_at or datetime.now(timezone.utc),
        )

    def current(self) -> TaxTableRecord:
        return self._record
