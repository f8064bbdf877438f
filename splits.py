"""
Split calculator: turns an expense total and a split policy into
per-participant shares.
"""
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from models import (
    AutoPercentage,
    ManualPercentage,
    PercentageEntry,
    Split,
    SplitResult,
    SplitType,
    ValidationError
)
from money import EPSILON, ZERO, parse_decimal, parse_money, to_decimal

HUNDRED = Decimal('100')
# Percentages are not money, so they only need to add up to 100 closely enough
PERCENT_TOLERANCE = Decimal('1e-9')


def _rejected(field: str, message: str) -> SplitResult:
    return SplitResult(error=ValidationError(field=field, message=message))


def allocation_delta(total: Decimal, splits: Sequence[Split]) -> Tuple[Decimal, Decimal]:
    """
    Returns (allocated, remaining). Remaining is negative when the splits
    allocate more than the total.
    """
    allocated = sum((s.amount for s in splits), ZERO)
    return allocated, total - allocated


def equal_splits(total: Decimal, participant_ids: Sequence[str]) -> List[Split]:
    """
    Divide total evenly. Leftover currency units go one at a time to the
    participants in input order, so the splits always sum to total.
    """
    if not participant_ids:
        return []

    count = len(participant_ids)
    share = (total / count).quantize(EPSILON, rounding=ROUND_DOWN)
    leftover_units = int((total - share * count) / EPSILON)

    splits = []
    for index, participant_id in enumerate(participant_ids):
        amount = share + EPSILON if index < leftover_units else share
        splits.append(Split(participant_id=participant_id, amount=amount))
    return splits


def redistribute_percentages(
    participant_ids: Sequence[str],
    entries: Mapping[str, PercentageEntry]
) -> Dict[str, PercentageEntry]:
    """
    Recompute every automatic percentage so that the automatic entries share
    whatever the manual entries leave of 100. Manual entries are kept as is.
    """
    manual_total = sum(
        (entries[pid].value for pid in participant_ids
         if pid in entries and entries[pid].manual),
        ZERO
    )
    auto_ids = [pid for pid in participant_ids if not (pid in entries and entries[pid].manual)]

    share = ZERO
    if auto_ids:
        share = max(ZERO, HUNDRED - manual_total) / len(auto_ids)

    result = {}
    for pid in participant_ids:
        if pid in auto_ids:
            result[pid] = AutoPercentage(share)
        else:
            result[pid] = entries[pid]
    return result


def set_manual_percentage(
    participant_ids: Sequence[str],
    entries: Mapping[str, PercentageEntry],
    participant_id: str,
    value
) -> Dict[str, PercentageEntry]:
    """Mark one participant's percentage as manual and refill the rest"""
    updated = dict(entries)
    updated[participant_id] = ManualPercentage(to_decimal(value))
    return redistribute_percentages(participant_ids, updated)


def percentage_splits(
    total: Decimal,
    participant_ids: Sequence[str],
    entries: Mapping[str, PercentageEntry]
) -> List[Split]:
    splits = [
        Split(
            participant_id=pid,
            amount=(entries[pid].value / HUNDRED * total).quantize(EPSILON, rounding=ROUND_HALF_UP),
            percentage=entries[pid].value
        )
        for pid in participant_ids
    ]

    percentage_total = sum((entries[pid].value for pid in participant_ids), ZERO)
    if splits and abs(percentage_total - HUNDRED) < PERCENT_TOLERANCE:
        _, residue = allocation_delta(total, splits)
        _spread_residue(splits, residue)
    return splits


def _spread_residue(splits: List[Split], residue: Decimal) -> None:
    """
    Hand the rounding residue out one unit at a time, in input order, to
    participants with a non-zero percentage. No share drops below zero.
    """
    step = EPSILON if residue > 0 else -EPSILON
    units = int(abs(residue) / EPSILON)
    eligible = [s for s in splits if s.percentage]

    while units and eligible:
        moved = False
        for split in eligible:
            if not units:
                break
            if split.amount + step < 0:
                continue
            split.amount += step
            units -= 1
            moved = True
        if not moved:
            break


def compute_splits(
    total,
    split_type,
    participant_ids: Sequence[str],
    manual_overrides: Optional[Mapping[str, object]] = None
) -> SplitResult:
    """
    Compute each participant's share of an expense.

    For UNEQUAL splits manual_overrides holds amounts, for PERCENTAGE splits
    it holds the percentages the user set by hand. Over- or under-allocation
    is not an error; it is reported through SplitResult.remaining.
    Malformed input comes back as SplitResult.error.
    """
    total_amount = parse_money(total)
    if total_amount is None:
        return _rejected('total', "Invalid total amount")
    if total_amount <= 0:
        return _rejected('total', "Total amount must be greater than zero")

    try:
        split_type = SplitType(split_type)
    except ValueError:
        return _rejected('split_type', f"Unknown split type: {split_type}")

    ids = [str(pid) for pid in participant_ids]
    if len(set(ids)) != len(ids):
        return _rejected('participant_ids', "Participant ids must be unique")

    overrides = {str(pid): value for pid, value in (manual_overrides or {}).items()}
    for pid in overrides:
        if pid not in ids:
            return _rejected('manual_overrides', f"Unknown participant: {pid}")

    if split_type == SplitType.EQUAL:
        if not ids:
            return _rejected('participant_ids', "An equal split needs at least one participant")
        splits = equal_splits(total_amount, ids)

    elif split_type == SplitType.UNEQUAL:
        splits = []
        for pid in ids:
            amount = parse_money(overrides.get(pid, 0))
            if amount is None:
                return _rejected('manual_overrides', f"Invalid amount for participant {pid}")
            if amount < 0:
                return _rejected('manual_overrides', f"Amount for participant {pid} cannot be negative")
            splits.append(Split(participant_id=pid, amount=amount))

    else:
        entries = {}
        for pid, value in overrides.items():
            percentage = parse_decimal(value)
            if percentage is None:
                return _rejected('manual_overrides', f"Invalid percentage for participant {pid}")
            if percentage < 0:
                return _rejected('manual_overrides', f"Percentage for participant {pid} cannot be negative")
            entries[pid] = ManualPercentage(percentage)
        entries = redistribute_percentages(ids, entries)
        splits = percentage_splits(total_amount, ids, entries)

    allocated, remaining = allocation_delta(total_amount, splits)
    return SplitResult(splits=splits, allocated=allocated, remaining=remaining)
