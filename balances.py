"""
Balance aggregation: derives what each participant paid and owes from the
stored expense splits.
"""
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple, Union

from models import Balance, Expense, Participant, ValidationError
from money import ZERO


def filter_expenses_by_group(expenses: Sequence[Expense], group_id: Optional[str]) -> List[Expense]:
    """Expenses of one group, or all of them when group_id is None"""
    if group_id is None:
        return list(expenses)
    return [e for e in expenses if e.group_id == group_id]


def compute_balances(
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
    group_id: Optional[str] = None
) -> Dict[str, Balance]:
    """
    Recompute paid and owed for every participant from scratch.
    Participants without activity stay at zero; ids that match no
    participant are ignored.
    """
    paid = {p.id: ZERO for p in participants}
    owed = {p.id: ZERO for p in participants}

    for expense in filter_expenses_by_group(expenses, group_id):
        if expense.paid_by in paid:
            paid[expense.paid_by] += expense.amount
        for split in expense.splits:
            if split.participant_id in owed:
                owed[split.participant_id] += split.amount

    return {pid: Balance(paid=paid[pid], owed=owed[pid]) for pid in paid}


def net_balances(balances: Dict[str, Balance]) -> Dict[str, Decimal]:
    return {pid: balance.net for pid, balance in balances.items()}


def summarize(
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
    group_id: Optional[str] = None
) -> dict:
    """Headline figures for a scope: total spent, total paid, head count"""
    scoped = filter_expenses_by_group(expenses, group_id)
    balances = compute_balances(participants, scoped)
    return {
        'total_expenses': sum((e.amount for e in scoped), ZERO),
        'total_paid': sum((b.paid for b in balances.values()), ZERO),
        'total_owed': sum((b.owed for b in balances.values()), ZERO),
        'participant_count': len(participants),
        'expense_count': len(scoped)
    }


def remove_participant(
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
    participant_id: str
) -> Union[Tuple[List[Participant], List[Expense]], ValidationError]:
    """
    Drop a participant and their splits from every expense. Expenses they
    paid for are kept. The ledger owner can never be removed.
    """
    target = next((p for p in participants if p.id == participant_id), None)
    if target is None:
        return ValidationError(field='participant_id', message=f"Unknown participant: {participant_id}")
    if target.is_owner:
        return ValidationError(field='participant_id', message="The ledger owner cannot be removed")

    remaining = [p for p in participants if p.id != participant_id]
    updated = [
        replace(expense, splits=[replace(s) for s in expense.splits if s.participant_id != participant_id])
        for expense in expenses
    ]
    return remaining, updated
