"""
Settlement resolver: greedy largest-debtor / largest-creditor matching.

Each round pairs the participant who owes the most with the one who is owed
the most and moves the smaller of the two amounts. Equal amounts are broken
by input order, earliest first. The result settles every balance to within
one currency unit but is not guaranteed to use the fewest possible payments.
"""
from decimal import Decimal
from typing import Dict, List, Mapping, Sequence, Union

from models import Balance, SettlementInstruction
from money import EPSILON, ZERO, is_dust, to_decimal, to_money


def net_amount(value: Union[Balance, Decimal, int, float, str]) -> Decimal:
    """Signed net of a Balance or a plain amount, without rounding"""
    if isinstance(value, Balance):
        return value.net
    return to_decimal(value)


def _largest(entries: List[list]) -> list:
    # max() keeps the first of equal candidates, which preserves input order
    return max(entries, key=lambda entry: entry[1])


def resolve_settlements(balances: Mapping[str, Union[Balance, Decimal]]) -> List[SettlementInstruction]:
    """
    Calculate who pays whom so every balance ends up at zero.
    Accepts either Balance objects or signed net amounts keyed by participant;
    positive means the participant is owed money.
    """
    debtors = []
    creditors = []
    for participant_id, value in balances.items():
        net = net_amount(value)
        # Balances within one unit of zero are already settled
        if net < -EPSILON:
            debtors.append([participant_id, -net])
        elif net > EPSILON:
            creditors.append([participant_id, net])

    settlements = []
    while debtors and creditors:
        debtor = _largest(debtors)
        creditor = _largest(creditors)

        settlement_amount = min(debtor[1], creditor[1])
        settlements.append(SettlementInstruction(
            from_person=debtor[0],
            to_person=creditor[0],
            amount=to_money(settlement_amount)
        ))

        debtor[1] -= settlement_amount
        creditor[1] -= settlement_amount

        if is_dust(debtor[1]):
            debtors = [d for d in debtors if d is not debtor]
        if is_dust(creditor[1]):
            creditors = [c for c in creditors if c is not creditor]

    return settlements


def apply_instructions(
    balances: Mapping[str, Union[Balance, Decimal]],
    instructions: Sequence[SettlementInstruction]
) -> Dict[str, Decimal]:
    """Net balances as they would be after every instruction is paid"""
    after = {pid: net_amount(value) for pid, value in balances.items()}
    for instruction in instructions:
        after[instruction.from_person] = after.get(instruction.from_person, ZERO) + instruction.amount
        after[instruction.to_person] = after.get(instruction.to_person, ZERO) - instruction.amount
    return after
