from datetime import date, datetime
from decimal import Decimal

import pytest

from config import Config
from models import Expense, Group, Participant, SettlementRecord, Split, SplitType

OWNER = Config.OWNER_ID


def make_expense(expense_id, amount, paid_by, shares, group_id='trip', split_type=SplitType.EQUAL):
    return Expense(
        id=expense_id,
        group_id=group_id,
        description=f"Expense {expense_id}",
        amount=Decimal(str(amount)),
        paid_by=paid_by,
        split_type=split_type,
        splits=[Split(participant_id=pid, amount=Decimal(str(share))) for pid, share in shares.items()],
        date=date(2024, 3, 1)
    )


def make_record(from_person, to_person, amount, group_id='trip', record_id=None):
    return SettlementRecord(
        id=record_id or f"{from_person}-{to_person}-{amount}",
        group_id=group_id,
        from_person=from_person,
        to_person=to_person,
        amount=Decimal(str(amount)),
        created_at=datetime(2024, 3, 2, 12, 0)
    )


@pytest.fixture
def participants():
    return [
        Participant(id=OWNER, name=Config.OWNER_NAME),
        Participant(id='bob', name='Bob'),
        Participant(id='cara', name='Cara')
    ]


@pytest.fixture
def group():
    return Group(id='trip', name='Trip', member_ids=['bob', 'cara'])


@pytest.fixture
def dinner():
    # Owner pays 90, split equally three ways
    return make_expense('dinner', 90, OWNER, {OWNER: 30, 'bob': 30, 'cara': 30})
