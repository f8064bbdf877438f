from datetime import date, datetime
from typing import Dict, List, Sequence, Tuple

from config import Config
from models import Expense, Group, Participant, SplitType, owner
from money import parse_decimal, parse_money


def with_owner(participants: Sequence[Participant]) -> List[Participant]:
    """Make sure the ledger owner is present, listed first"""
    owners = [p for p in participants if p.is_owner] or [owner()]
    return owners[:1] + [p for p in participants if not p.is_owner]


def validate_amount(value, label: str) -> Tuple[bool, str]:
    """Validate a positive expense or settlement amount"""
    amount = parse_money(value)
    if amount is None:
        return False, f"Invalid {label}"
    if amount < Config.MIN_AMOUNT:
        return False, f"{label.capitalize()} must be at least {Config.MIN_AMOUNT}"
    if amount > Config.MAX_AMOUNT:
        return False, f"{label.capitalize()} cannot exceed {Config.MAX_AMOUNT}"
    return True, ""


def validate_expense(expense: Expense, groups: Dict[str, Group]) -> Tuple[bool, str]:
    """
    Check that an expense belongs to a known group and only involves the
    owner or members of that group
    """
    group = groups.get(expense.group_id)
    if group is None:
        return False, f"Expense {expense.id} references unknown group {expense.group_id}"

    if expense.amount <= 0:
        return False, f"Amount of expense {expense.id} must be greater than zero"

    if not group.has_participant(expense.paid_by):
        return False, f"Payer {expense.paid_by} is not a member of group {group.name}"

    for split in expense.splits:
        if not group.has_participant(split.participant_id):
            return False, f"Participant {split.participant_id} is not a member of group {group.name}"
        if split.amount < 0:
            return False, f"Split for {split.participant_id} in expense {expense.id} cannot be negative"

    return True, ""


def validate_split_data(data: dict) -> Tuple[bool, str]:
    """
    Validate a split calculation request
    Returns (is_valid, error_message)
    """
    if 'total' not in data:
        return False, "Total amount is required"

    is_valid, error_message = validate_amount(data['total'], 'total amount')
    if not is_valid:
        return False, error_message

    split_type = data.get('split_type', SplitType.EQUAL.value)
    if split_type not in [t.value for t in SplitType]:
        return False, f"Unknown split type: {split_type}"

    participant_ids = data.get('participant_ids')
    if not isinstance(participant_ids, list) or not participant_ids:
        return False, "At least one participant is required"
    if len(participant_ids) > Config.MAX_PARTICIPANTS:
        return False, f"Number of participants cannot exceed {Config.MAX_PARTICIPANTS}"

    if not isinstance(data.get('overrides', {}), dict):
        return False, "Overrides must map participant ids to values"

    return True, ""


def validate_ledger_data(data: dict) -> Tuple[bool, str]:
    """
    Validate the raw shape of a ledger snapshot (participants, groups,
    expenses, settlements) before it is parsed into models
    Returns (is_valid, error_message)
    """
    participants = data.get('participants', [])
    if not isinstance(participants, list):
        return False, "Participants must be a list"
    if len(participants) > Config.MAX_PARTICIPANTS:
        return False, f"Number of participants cannot exceed {Config.MAX_PARTICIPANTS}"

    seen = set()
    for p in participants:
        if 'id' not in p:
            return False, "All participants must have an id"
        if 'name' not in p or not str(p['name']).strip():
            return False, "All participants must have a name"
        if str(p['id']) in seen:
            return False, f"Duplicate participant id {p['id']}"
        seen.add(str(p['id']))

    for g in data.get('groups', []):
        if 'id' not in g:
            return False, "All groups must have an id"

    for e in data.get('expenses', []):
        for key in ('id', 'group_id', 'amount', 'paid_by'):
            if key not in e:
                return False, f"Expense is missing {key}"
        is_valid, error_message = validate_amount(e['amount'], 'expense amount')
        if not is_valid:
            return False, error_message
        if e.get('split_type', SplitType.EQUAL.value) not in [t.value for t in SplitType]:
            return False, f"Unknown split type: {e.get('split_type')}"
        if e.get('date') and not _is_iso_date(e['date']):
            return False, f"Invalid date for expense {e['id']}"
        for s in e.get('splits', []):
            if 'participant_id' not in s or parse_money(s.get('amount')) is None:
                return False, f"Invalid split in expense {e['id']}"
            if s.get('percentage') is not None and parse_decimal(s['percentage']) is None:
                return False, f"Invalid split percentage in expense {e['id']}"

    for s in data.get('settlements', []):
        is_valid, error_message = validate_settlement_record(s)
        if not is_valid:
            return False, error_message

    return True, ""


def validate_settlement_record(s: dict) -> Tuple[bool, str]:
    """
    Validate one stored settlement record
    Returns (is_valid, error_message)
    """
    for key in ('id', 'group_id', 'from_person', 'to_person', 'amount'):
        if key not in s:
            return False, f"Settlement is missing {key}"
    if s.get('created_at') and not _is_iso_datetime(s['created_at']):
        return False, f"Invalid created_at for settlement {s['id']}"
    return validate_amount(s['amount'], 'settlement amount')


def validate_settlement_data(data: dict) -> Tuple[bool, str]:
    """
    Validate a request to mark or unmark a settlement
    Returns (is_valid, error_message)
    """
    for key in ('group_id', 'from_person', 'to_person', 'amount'):
        if key not in data:
            return False, f"{key} is required"

    if data['from_person'] == data['to_person']:
        return False, "A participant cannot settle with themselves"

    for s in data.get('settlements', []):
        is_valid, error_message = validate_settlement_record(s)
        if not is_valid:
            return False, error_message

    return validate_amount(data['amount'], 'settlement amount')


def validate_percentage_data(data: dict) -> Tuple[bool, str]:
    """
    Validate a request to set one participant's percentage
    Returns (is_valid, error_message)
    """
    participant_ids = [str(pid) for pid in data.get('participant_ids', [])]
    participant_id = str(data.get('participant_id', ''))
    if participant_id not in participant_ids:
        return False, f"Unknown participant: {participant_id}"

    value = parse_decimal(data.get('value'))
    if value is None or value < 0:
        return False, "Percentage must be a non-negative number"

    entries = data.get('entries', {})
    if not isinstance(entries, dict):
        return False, "Entries must map participant ids to percentages"
    for pid, entry in entries.items():
        entry_value = parse_decimal(entry.get('value', 0)) if isinstance(entry, dict) else None
        if entry_value is None or entry_value < 0:
            return False, f"Invalid percentage for participant {pid}"

    return True, ""


def _is_iso_date(value) -> bool:
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError):
        return False
    return True


def _is_iso_datetime(value) -> bool:
    try:
        datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return False
    return True
