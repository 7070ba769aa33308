"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Owner
  2xxx: Entries
  3xxx: Settlements
  4xxx: Parties
  5xxx: Alerts
  9xxx: System
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Owner ---

class UnauthorizedError(AppError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(1001, message, 401)


class AuthorizationError(AppError):
    """The record exists but belongs to another owner."""

    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(1002, f"You can only access your own {resource}: {resource_id}", 403)


# --- 2xxx: Entries / validation ---

class ValidationError(AppError):
    """Caller-fixable input problem. ``rule`` names the violated rule."""

    def __init__(self, rule: str, message: str, code: int = 2001) -> None:
        self.rule = rule
        super().__init__(code, message, 422)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class EntryNotFoundError(NotFoundError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(2002, f"Entry not found: {entry_id}")


class AmountBelowSettledError(ValidationError):
    def __init__(self, amount: Decimal, settled: Decimal) -> None:
        super().__init__(
            "amount_below_settled",
            f"Amount {amount} is less than the {settled} already settled",
            code=2003,
        )


class DerivedEntryImmutableError(ValidationError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(
            "derived_entry_immutable",
            f"Entry {entry_id} was generated by a settlement; reverse the settlement instead",
            code=2004,
        )


# --- 3xxx: Settlements ---

class SettlementNotFoundError(NotFoundError):
    def __init__(self, settlement_id: str) -> None:
        super().__init__(3001, f"Settlement not found: {settlement_id}")


class EntryNotSettleableError(ValidationError):
    def __init__(self, entry_type: str) -> None:
        super().__init__(
            "entry_not_settleable",
            f"Only Credit and Advance entries can be settled, got {entry_type}",
            code=3002,
        )


class SettlementExceedsRemainingError(ValidationError):
    def __init__(self, amount: Decimal, remaining: Decimal) -> None:
        super().__init__(
            "exceeds_remaining",
            f"Settlement amount {amount} exceeds remaining balance {remaining}",
            code=3003,
        )


class ConflictError(AppError):
    """Compare-and-swap lost: the record changed between read and write."""

    def __init__(self, message: str, code: int = 3004) -> None:
        super().__init__(code, message, 409)


class ConcurrentModificationError(ConflictError):
    def __init__(self, entry_id: str, attempts: int) -> None:
        super().__init__(
            f"Entry {entry_id} was modified concurrently; gave up after {attempts} attempts",
            code=3005,
        )


# --- 4xxx: Parties ---

class PartyNotFoundError(NotFoundError):
    def __init__(self, party_id: str) -> None:
        super().__init__(4001, f"Party not found: {party_id}")


class DuplicatePartyError(AppError):
    def __init__(self, name: str) -> None:
        super().__init__(4002, f"A party named {name!r} already exists", 409)


# --- 5xxx: Alerts ---

class AlertNotFoundError(NotFoundError):
    def __init__(self, alert_id: str) -> None:
        super().__init__(5001, f"Alert not found: {alert_id}")


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class PersistenceError(AppError):
    """Store unavailable. The whole unit of work was rolled back; safe to retry."""

    def __init__(self, detail: str = "Storage unavailable") -> None:
        super().__init__(9003, detail, 503)
