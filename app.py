from flask import Flask, request, jsonify
from flask_cors import CORS
from decimal import Decimal
import traceback

from config import Config
from models import (
    AutoPercentage,
    Expense,
    Group,
    ManualPercentage,
    Participant,
    SettlementRecord
)
from money import money_str, to_decimal
from splits import compute_splits, set_manual_percentage
from balances import compute_balances, summarize
from settlements import resolve_settlements
from ledger import (
    adjusted_balances,
    resolve_settlements_net_of_recorded,
    settlement_statuses,
    toggle_settlement
)
from utils import (
    validate_expense,
    validate_ledger_data,
    validate_percentage_data,
    validate_settlement_data,
    validate_split_data,
    with_owner
)

app = Flask(__name__)
app.config.from_object(Config)
CORS(app)


def load_snapshot(data: dict):
    """
    Parse a full ledger snapshot from a request body.
    Returns (snapshot, error_message)
    """
    is_valid, error_message = validate_ledger_data(data)
    if not is_valid:
        return None, error_message

    participants = with_owner([Participant.from_dict(p) for p in data.get('participants', [])])
    groups = {}
    for g in data.get('groups', []):
        group = Group.from_dict(g)
        groups[group.id] = group
    expenses = [Expense.from_dict(e) for e in data.get('expenses', [])]
    records = [SettlementRecord.from_dict(s) for s in data.get('settlements', [])]

    for expense in expenses:
        is_valid, error_message = validate_expense(expense, groups)
        if not is_valid:
            return None, error_message

    group_id = data.get('group_id')
    if group_id is not None:
        group_id = str(group_id)
        if group_id not in groups:
            return None, f"Unknown group {group_id}"
        participants = [p for p in participants if groups[group_id].has_participant(p.id)]

    return {
        'participants': participants,
        'groups': groups,
        'expenses': expenses,
        'records': records,
        'group_id': group_id
    }, ""


@app.route('/api/splits', methods=['POST'])
def create_splits():
    """Calculate the splits of a single expense"""
    try:
        data = request.get_json()

        is_valid, error_message = validate_split_data(data)
        if not is_valid:
            return jsonify({'error': error_message}), 400

        result = compute_splits(
            data['total'],
            data.get('split_type', 'equal'),
            [str(pid) for pid in data['participant_ids']],
            data.get('overrides', {})
        )
        if not result.ok:
            return jsonify({'error': result.error.message, 'field': result.error.field}), 400

        return jsonify({
            'success': True,
            **result.to_dict()
        }), 200

    except Exception as e:
        print(f"Error calculating splits: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@app.route('/api/percentages', methods=['POST'])
def update_percentage():
    """Set one participant's percentage by hand and refill the automatic ones"""
    try:
        data = request.get_json()

        is_valid, error_message = validate_percentage_data(data)
        if not is_valid:
            return jsonify({'error': error_message}), 400

        participant_ids = [str(pid) for pid in data['participant_ids']]
        entries = {}
        for pid, entry in data.get('entries', {}).items():
            entry_type = ManualPercentage if entry.get('manual') else AutoPercentage
            entries[str(pid)] = entry_type(to_decimal(entry.get('value', 0)))

        entries = set_manual_percentage(
            participant_ids, entries, str(data['participant_id']), to_decimal(data['value'])
        )

        return jsonify({
            'success': True,
            'entries': {
                pid: {'value': str(entry.value.quantize(Decimal('0.01'))), 'manual': entry.manual}
                for pid, entry in entries.items()
            }
        }), 200

    except Exception as e:
        print(f"Error updating percentages: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@app.route('/api/balances', methods=['POST'])
def get_balances():
    """Balances for a ledger snapshot, before and after recorded settlements"""
    try:
        snapshot, error_message = load_snapshot(request.get_json())
        if snapshot is None:
            return jsonify({'error': error_message}), 400

        balances = compute_balances(snapshot['participants'], snapshot['expenses'], snapshot['group_id'])
        adjusted = adjusted_balances(balances, snapshot['records'], snapshot['group_id'])
        summary = summarize(snapshot['participants'], snapshot['expenses'], snapshot['group_id'])

        names = {p.id: p.name for p in snapshot['participants']}
        group = snapshot['groups'].get(snapshot['group_id'])
        return jsonify({
            'success': True,
            'currency': group.currency if group else Config.DEFAULT_CURRENCY,
            'balances': [
                {'participant_id': pid, 'name': names[pid], **balance.to_dict()}
                for pid, balance in balances.items()
            ],
            'adjusted_balances': [
                {'participant_id': pid, 'name': names[pid], **balance.to_dict()}
                for pid, balance in adjusted.items()
            ],
            'summary': {
                key: money_str(value) if isinstance(value, Decimal) else value
                for key, value in summary.items()
            }
        }), 200

    except Exception as e:
        print(f"Error getting balances: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@app.route('/api/settlements', methods=['POST'])
def get_settlements():
    """Recommended payments, with already recorded ones flagged"""
    try:
        snapshot, error_message = load_snapshot(request.get_json())
        if snapshot is None:
            return jsonify({'error': error_message}), 400

        balances = compute_balances(snapshot['participants'], snapshot['expenses'], snapshot['group_id'])
        recommendations = resolve_settlements(balances)
        residual = resolve_settlements_net_of_recorded(balances, snapshot['records'], snapshot['group_id'])

        return jsonify({
            'success': True,
            'recommendations': [
                {**instruction.to_dict(), 'settled': settled}
                for instruction, settled in settlement_statuses(
                    recommendations, snapshot['records'], snapshot['group_id']
                )
            ],
            'outstanding': [s.to_dict() for s in residual]
        }), 200

    except Exception as e:
        print(f"Error getting settlements: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@app.route('/api/settlements/toggle', methods=['POST'])
def toggle():
    """Mark a payment as settled, or unmark it if it already is"""
    try:
        data = request.get_json()

        is_valid, error_message = validate_settlement_data(data)
        if not is_valid:
            return jsonify({'error': error_message}), 400

        records = [SettlementRecord.from_dict(s) for s in data.get('settlements', [])]
        records, settled = toggle_settlement(
            records,
            str(data['group_id']),
            str(data['from_person']),
            str(data['to_person']),
            data['amount']
        )

        return jsonify({
            'success': True,
            'settled': settled,
            'settlements': [r.to_dict() for r in records]
        }), 200

    except Exception as e:
        print(f"Error toggling settlement: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@app.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Endpoint not found'}), 404

@app.errorhandler(500)
def internal_error(error):
    return jsonify({'error': 'Internal server error'}), 500

if __name__ == '__main__':
    print("Starting Expense Ledger API...")
    print(f"Currency unit: {Config.CURRENCY_UNIT}")
    app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)
