"""
Core Data Models for Stash

A snapshot is one dated observation of every tracked account balance.
These models define the schema for everything that is stored on disk,
imported from CSV, or edited through the UI.

DESIGN DECISION: The snapshot total is a plain property, never a field.
It is recomputed from the accounts on every access and is never
serialized, so it cannot drift from its constituents.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountCategory(str, Enum):
    """
    Supported account categories.

    The value is the display label. It is what gets written to disk and
    what CSV rows must match exactly.
    """
    CRYPTO = "Crypto"
    SAVINGS = "Savings"
    STOCKS_AND_SHARES = "Stocks & Shares"
    CURRENT_ACCOUNT = "Current Account"

    @property
    def label(self) -> str:
        return self.value


# =============================================================================
# SNAPSHOT MODELS
# =============================================================================

class AccountBalance(BaseModel):
    """
    One holding inside a snapshot.

    Owned by exactly one Snapshot. The id is stable across edits so the
    edit form can keep track of rows. Immutable: edits produce a copy.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique account balance ID"
    )
    institution: str = Field(
        default="",
        description="Bank, broker or wallet name"
    )
    amount: Decimal = Field(
        default=Decimal("0"),
        allow_inf_nan=False,
        description="Signed balance, no currency attached"
    )
    category: AccountCategory = Field(
        default=AccountCategory.SAVINGS,
        description="Account category"
    )


class Snapshot(BaseModel):
    """
    A point-in-time observation of account balances.

    Dates are not unique: two snapshots may share a date.
    Accounts keep insertion order for display only.

    Frozen, so the only way to change a stored snapshot is a full
    replace by id through the store.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique snapshot ID"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the observation"
    )
    accounts: tuple[AccountBalance, ...] = Field(
        default_factory=tuple,
        description="Balances recorded in this snapshot"
    )

    @property
    def total(self) -> Decimal:
        """Sum of all account amounts (recomputed on every access)."""
        return sum((account.amount for account in self.accounts), Decimal("0"))

    @property
    def month_key(self) -> str:
        """Chronologically sortable month key (YYYY-MM)."""
        return self.date.strftime("%Y-%m")

    def categories(self) -> set[AccountCategory]:
        """Categories present in this snapshot."""
        return {account.category for account in self.accounts}

    def total_for(self, category: AccountCategory) -> Decimal:
        """Sum of the amounts recorded under one category."""
        return sum(
            (account.amount for account in self.accounts if account.category == category),
            Decimal("0"),
        )


def sort_by_date(snapshots) -> list[Snapshot]:
    """
    Display order: date ascending.

    The sort is stable, so snapshots sharing a date keep storage order.
    """
    return sorted(snapshots, key=lambda snapshot: snapshot.date)
