from decimal import Decimal

import pytest

from ledger import (
    adjust_net_balances,
    adjusted_balances,
    find_recorded_settlement,
    is_settlement_recorded,
    record_settlement,
    resolve_settlements_net_of_recorded,
    settlement_statuses,
    toggle_settlement,
    unrecord_settlement
)
from models import Balance, SettlementInstruction
from settlements import resolve_settlements

from conftest import make_record


@pytest.fixture
def balances():
    return {
        'A': Balance(paid=Decimal('90'), owed=Decimal('30')),
        'B': Balance(owed=Decimal('30')),
        'C': Balance(owed=Decimal('30'))
    }


def test_adjusted_balances_apply_recorded_payment(balances):
    adjusted = adjusted_balances(balances, [make_record('B', 'A', 30)])

    assert adjusted['B'].net == 0
    assert adjusted['A'].net == Decimal('30')
    assert adjusted['C'].net == Decimal('-30')
    # Expense-derived figures never change
    assert adjusted['A'].paid == Decimal('90')
    assert adjusted['B'].owed == Decimal('30')
    assert balances['B'].net == Decimal('-30')


def test_no_records_means_no_change(balances):
    assert adjusted_balances(balances, []) == balances
    assert resolve_settlements_net_of_recorded(balances, []) == resolve_settlements(balances)


def test_records_outside_scope_or_balance_map_are_skipped(balances):
    records = [
        make_record('B', 'A', 30, group_id='flat'),
        make_record('B', 'stranger', 10)
    ]

    adjusted = adjusted_balances(balances, records, group_id='trip')

    assert adjusted == balances


def test_recorded_payment_is_not_recommended_again(balances):
    residual = resolve_settlements_net_of_recorded(balances, [make_record('B', 'A', 30)])

    assert residual == [SettlementInstruction(from_person='C', to_person='A', amount=Decimal('30'))]


def test_partial_payment_reduces_recommendation():
    net = {'A': Decimal('-80'), 'B': Decimal('80')}

    residual = resolve_settlements_net_of_recorded(net, [make_record('A', 'B', 50)])

    assert residual == [SettlementInstruction(from_person='A', to_person='B', amount=Decimal('30'))]


def test_fully_recorded_payment_disappears():
    net = {'A': Decimal('-50'), 'B': Decimal('50')}

    assert resolve_settlements_net_of_recorded(net, [make_record('A', 'B', 50)]) == []
    assert adjust_net_balances(net, [make_record('A', 'B', 50)]) == {'A': 0, 'B': 0}


def test_lookup_matches_within_one_unit():
    records = [make_record('B', 'A', 30)]

    assert is_settlement_recorded(records, 'B', 'A', '30.004')
    assert not is_settlement_recorded(records, 'B', 'A', '30.01')
    assert not is_settlement_recorded(records, 'A', 'B', 30)
    assert not is_settlement_recorded(records, 'B', 'A', 30, group_id='flat')
    assert not is_settlement_recorded([], 'B', 'A', 30)


def test_record_settlement_does_not_duplicate():
    records = record_settlement([], 'trip', 'B', 'A', 30, record_id='r1')
    again = record_settlement(records, 'trip', 'B', 'A', '30.00')

    assert len(records) == 1
    assert records[0].id == 'r1'
    assert again == records


def test_toggle_round_trip_leaves_other_records_alone():
    other = make_record('B', 'A', 10, record_id='earlier')

    records, settled = toggle_settlement([other], 'trip', 'B', 'A', 30)

    assert settled
    assert len(records) == 2

    records, settled = toggle_settlement(records, 'trip', 'B', 'A', 30)

    assert not settled
    assert records == [other]


def test_unrecord_removes_only_the_exact_match():
    first = make_record('B', 'A', 30, record_id='first')
    second = make_record('B', 'A', 20, record_id='second')
    records = [first, second]

    assert unrecord_settlement(records, 'trip', 'B', 'A', 20) == [first]
    assert unrecord_settlement(records, 'trip', 'B', 'A', 5) == records
    assert find_recorded_settlement(records, 'B', 'A', 30) is first
    # Input list is never modified
    assert records == [first, second]


def test_statuses_flag_settled_recommendations(balances):
    recommendations = resolve_settlements(balances)

    statuses = settlement_statuses(recommendations, [make_record('C', 'A', 30)], 'trip')

    assert [(i.from_person, settled) for i, settled in statuses] == [('B', False), ('C', True)]
