from decimal import Decimal

from config import Config
from models import Balance, Expense, Group, Participant, SettlementRecord, SplitType, owner

from conftest import OWNER, make_expense, make_record


def test_group_always_includes_owner_first():
    group = Group.from_dict({'id': 'trip', 'name': 'Trip', 'member_ids': ['bob', OWNER, 'cara']})

    assert group.member_ids == ['bob', 'cara']
    assert group.participant_ids == [OWNER, 'bob', 'cara']
    assert group.currency == Config.DEFAULT_CURRENCY
    assert group.to_dict()['member_ids'] == ['bob', 'cara']


def test_owner_participant():
    assert owner().is_owner
    assert not Participant.from_dict({'id': 'bob', 'name': ' Bob '}).is_owner
    assert Participant.from_dict({'id': 'bob', 'name': ' Bob '}).to_dict() == {'id': 'bob', 'name': 'Bob'}


def test_expense_survives_serialization():
    expense = make_expense('taxi', '40.01', 'bob', {OWNER: '20.01', 'bob': '20'}, split_type=SplitType.UNEQUAL)

    restored = Expense.from_dict(expense.to_dict())

    assert restored == expense
    assert expense.to_dict()['splits'][1] == {'participant_id': 'bob', 'amount': '20.00'}


def test_settlement_record_serialization():
    record = make_record('bob', OWNER, '12.5')

    assert SettlementRecord.from_dict(record.to_dict()) == record
    assert record.to_dict()['amount'] == '12.50'


def test_balance_net_includes_recorded_payments():
    balance = Balance(paid=Decimal('10'), owed=Decimal('40'), settled_out=Decimal('25'), settled_in=Decimal('5'))

    assert balance.net == Decimal('-10')
    assert balance.to_dict()['net'] == '-10.00'
