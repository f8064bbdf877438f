"""
Settlement ledger: folds payments the user already made in real life back
into balances and recommendations.

Records refer to participants by the same keys the balance maps use.
Every function here returns new lists or maps; records are never mutated.
"""
import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from models import Balance, SettlementInstruction, SettlementRecord
from money import is_dust, to_money
from settlements import net_amount, resolve_settlements


def _in_scope(record: SettlementRecord, group_id: Optional[str]) -> bool:
    return group_id is None or record.group_id == group_id


def adjusted_balances(
    balances: Mapping[str, Balance],
    records: Sequence[SettlementRecord],
    group_id: Optional[str] = None
) -> Dict[str, Balance]:
    """
    Balances with recorded payments applied: the payer's net goes up by the
    amount and the payee's net goes down by it. Records naming a participant
    outside the balance map are skipped.
    """
    adjusted = {pid: replace(balance) for pid, balance in balances.items()}
    for record in records:
        if not _in_scope(record, group_id):
            continue
        if record.from_person not in adjusted or record.to_person not in adjusted:
            continue
        payer = adjusted[record.from_person]
        payee = adjusted[record.to_person]
        adjusted[record.from_person] = replace(payer, settled_out=payer.settled_out + record.amount)
        adjusted[record.to_person] = replace(payee, settled_in=payee.settled_in + record.amount)
    return adjusted


def adjust_net_balances(
    balances: Mapping[str, Union[Balance, Decimal]],
    records: Sequence[SettlementRecord],
    group_id: Optional[str] = None
) -> Dict[str, Decimal]:
    """Same as adjusted_balances, for signed net amounts"""
    adjusted = {pid: net_amount(value) for pid, value in balances.items()}
    for record in records:
        if not _in_scope(record, group_id):
            continue
        if record.from_person not in adjusted or record.to_person not in adjusted:
            continue
        adjusted[record.from_person] += record.amount
        adjusted[record.to_person] -= record.amount
    return adjusted


def resolve_settlements_net_of_recorded(
    balances: Mapping[str, Union[Balance, Decimal]],
    records: Sequence[SettlementRecord],
    group_id: Optional[str] = None
) -> List[SettlementInstruction]:
    """Recommendations for whatever is still outstanding after recorded payments"""
    return resolve_settlements(adjust_net_balances(balances, records, group_id))


def find_recorded_settlement(
    records: Sequence[SettlementRecord],
    from_person: str,
    to_person: str,
    amount,
    group_id: Optional[str] = None
) -> Optional[SettlementRecord]:
    target = to_money(amount)
    for record in records:
        if not _in_scope(record, group_id):
            continue
        if record.from_person != from_person or record.to_person != to_person:
            continue
        if is_dust(record.amount - target):
            return record
    return None


def is_settlement_recorded(
    records: Sequence[SettlementRecord],
    from_person: str,
    to_person: str,
    amount,
    group_id: Optional[str] = None
) -> bool:
    """True if a record matches both parties and the amount to within one currency unit"""
    return find_recorded_settlement(records, from_person, to_person, amount, group_id) is not None


def record_settlement(
    records: Sequence[SettlementRecord],
    group_id: str,
    from_person: str,
    to_person: str,
    amount,
    record_id: Optional[str] = None,
    created_at: Optional[datetime] = None
) -> List[SettlementRecord]:
    """Add a record unless an identical one already exists"""
    if is_settlement_recorded(records, from_person, to_person, amount, group_id):
        return list(records)

    record = SettlementRecord(
        id=record_id or str(uuid.uuid4()),
        group_id=group_id,
        from_person=from_person,
        to_person=to_person,
        amount=to_money(amount),
        created_at=created_at or datetime.now()
    )
    return list(records) + [record]


def unrecord_settlement(
    records: Sequence[SettlementRecord],
    group_id: str,
    from_person: str,
    to_person: str,
    amount
) -> List[SettlementRecord]:
    """Remove the one record matching this exact payment, leaving others between the pair"""
    match = find_recorded_settlement(records, from_person, to_person, amount, group_id)
    if match is None:
        return list(records)
    return [r for r in records if r is not match]


def toggle_settlement(
    records: Sequence[SettlementRecord],
    group_id: str,
    from_person: str,
    to_person: str,
    amount
) -> Tuple[List[SettlementRecord], bool]:
    """
    Flip a recommendation between pending and settled.
    Returns the new record list and whether the payment is now settled.
    """
    if is_settlement_recorded(records, from_person, to_person, amount, group_id):
        return unrecord_settlement(records, group_id, from_person, to_person, amount), False
    return record_settlement(records, group_id, from_person, to_person, amount), True


def settlement_statuses(
    instructions: Sequence[SettlementInstruction],
    records: Sequence[SettlementRecord],
    group_id: Optional[str] = None
) -> List[Tuple[SettlementInstruction, bool]]:
    """Pair each recommendation with whether it has already been paid"""
    return [
        (instruction, is_settlement_recorded(
            records, instruction.from_person, instruction.to_person, instruction.amount, group_id
        ))
        for instruction in instructions
    ]
