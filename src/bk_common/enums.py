"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class EntryType(str, Enum):
    CASH_IN = "Cash IN"
    CASH_OUT = "Cash OUT"
    CREDIT = "Credit"
    ADVANCE = "Advance"


class Category(str, Enum):
    SALES = "Sales"
    COGS = "COGS"
    OPEX = "Opex"
    ASSETS = "Assets"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    BANK = "Bank"
    NONE = "None"


class SettlementState(str, Enum):
    """Per-entry settlement state, derived from remaining_amount."""
    OPEN = "OPEN"
    PARTIALLY_SETTLED = "PARTIALLY_SETTLED"
    SETTLED = "SETTLED"


class SettlementType(str, Enum):
    CREDIT = "credit"
    ADVANCE = "advance"


class PartyType(str, Enum):
    CUSTOMER = "Customer"
    VENDOR = "Vendor"
    BOTH = "Both"


class AlertType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


SETTLEABLE_ENTRY_TYPES: frozenset[EntryType] = frozenset({EntryType.CREDIT, EntryType.ADVANCE})
EXPENSE_CATEGORIES: frozenset[Category] = frozenset({Category.COGS, Category.OPEX, Category.ASSETS})
