"""Running balance of one counterparty.

    balance = opening_balance + debits - credits

debits   Cash IN, Credit Sales, Advance Sales     (the party's side of our income)
credits  Cash OUT, Credit / Advance expenses      (the party's side of our spend)

Entries generated by settling a credit are skipped: the credit entry they
settle has already been counted. Outstanding amounts come from the open
Credit entries linked to the party.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from src.bk_common.enums import Category, EntryType
from src.bk_common.money import sum_money
from src.bk_ledger.domain.models import Entry, Party


def is_debit(entry: Entry) -> bool:
    if entry.entry_type == EntryType.CASH_IN:
        return True
    return entry.entry_type in (EntryType.CREDIT, EntryType.ADVANCE) and (
        entry.category == Category.SALES
    )


@dataclass(frozen=True)
class PartyLedgerBalance:
    party_id: str
    opening_balance: Decimal
    debits: Decimal
    credits: Decimal
    balance: Decimal
    receivable: Decimal  # open Credit Sales: the party owes us
    payable: Decimal     # open Credit purchases: we owe the party
    entry_count: int


def party_balance(party: Party, entries: Iterable[Entry]) -> PartyLedgerBalance:
    linked = [e for e in entries if e.party_id == party.id and not e.is_settlement_derived]
    debits = sum_money([e.amount for e in linked if is_debit(e)])
    credits = sum_money([e.amount for e in linked if not is_debit(e)])
    open_credit = [e for e in linked if e.entry_type == EntryType.CREDIT and e.outstanding > 0]
    return PartyLedgerBalance(
        party_id=party.id,
        opening_balance=party.opening_balance,
        debits=debits,
        credits=credits,
        balance=party.opening_balance + debits - credits,
        receivable=sum_money([e.outstanding for e in open_credit if e.category == Category.SALES]),
        payable=sum_money([e.outstanding for e in open_credit if e.category != Category.SALES]),
        entry_count=len(linked),
    )
