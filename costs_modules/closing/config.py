"""Month Closing Configuration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from costs_kernel.models.enums import EntryType


@dataclass(frozen=True)
class ClosingConfig:
    """Configuration for the month closing."""

    # Category whose projects absorb non-productive time (exact, case-sensitive)
    non_productive_category_name: str = "No productivos"
    counted_entry_types: tuple[EntryType, ...] = (EntryType.WORK, EntryType.PAUSE_COFFEE)
    auto_reopen_reason: str = "Automatically reopened: month inputs changed after closing"
    # 40 h/week x 21.75 working days / 5 days
    standard_monthly_hours: Decimal = Decimal("174")
    max_reopen_reason_length: int = 500

    @classmethod
    def from_dict(cls, data: dict) -> "ClosingConfig":
        """Build from a YAML mapping; unknown keys are ignored."""
        defaults = cls()
        entry_types = data.get("counted_entry_types")
        return cls(
            non_productive_category_name=data.get(
                "non_productive_category_name", defaults.non_productive_category_name
            ),
            counted_entry_types=(
                tuple(EntryType(t) for t in entry_types)
                if entry_types
                else defaults.counted_entry_types
            ),
            auto_reopen_reason=data.get("auto_reopen_reason", defaults.auto_reopen_reason),
            standard_monthly_hours=Decimal(
                str(data.get("standard_monthly_hours", defaults.standard_monthly_hours))
            ),
            max_reopen_reason_length=int(
                data.get("max_reopen_reason_length", defaults.max_reopen_reason_length)
            ),
        )
