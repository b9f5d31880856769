"""
Chart Data Models

Output of the aggregation engine. These are what the UI plots,
and what the tests compare against.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


OVERALL_TOTAL = "Overall Total"
NO_DATA = "No Data"


class MonthlyCategoryTotal(BaseModel):
    """One (month, category, total) triple of the monthly chart."""
    model_config = ConfigDict(frozen=True)

    month: str = Field(
        ...,
        description="Month key (YYYY-MM), or the no-data sentinel"
    )
    category: str = Field(
        ...,
        description="Category label, or the overall-total pseudo-category"
    )
    total: Decimal = Field(
        default=Decimal("0"),
        description="Sum of all balances in this month and category"
    )

    @property
    def is_sentinel(self) -> bool:
        return self.month == NO_DATA and self.category == NO_DATA

    @classmethod
    def no_data(cls) -> "MonthlyCategoryTotal":
        """Placeholder returned for an empty collection."""
        return cls(month=NO_DATA, category=NO_DATA, total=Decimal("0"))


class CategoryPoint(BaseModel):
    """
    One point of the per-date trend chart.

    There is one point per active category per snapshot, plus an
    optional overall-total point.
    """
    model_config = ConfigDict(frozen=True)

    snapshot_id: Optional[UUID] = None
    date: dt.date
    category: str
    total: Decimal = Decimal("0")

    @property
    def is_overall(self) -> bool:
        return self.category == OVERALL_TOTAL
