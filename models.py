from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from config import Config
from money import ZERO, money_str, to_money


class SplitType(str, Enum):
    """How an expense is divided among its participants"""
    EQUAL = 'equal'
    UNEQUAL = 'unequal'
    PERCENTAGE = 'percentage'


@dataclass
class Participant:
    """Represents a person who can pay for or share expenses"""
    id: str
    name: str

    @property
    def is_owner(self) -> bool:
        return self.id == Config.OWNER_ID

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Participant':
        return cls(id=str(data['id']), name=str(data['name']).strip())


def owner() -> Participant:
    """The ledger owner, present in every group"""
    return Participant(id=Config.OWNER_ID, name=Config.OWNER_NAME)


@dataclass
class Group:
    """A set of participants sharing expenses. The owner is implicit."""
    id: str
    name: str
    member_ids: List[str] = field(default_factory=list)
    currency: str = Config.DEFAULT_CURRENCY

    @property
    def participant_ids(self) -> List[str]:
        ids = [Config.OWNER_ID]
        for member_id in self.member_ids:
            if member_id not in ids:
                ids.append(member_id)
        return ids

    def has_participant(self, participant_id: str) -> bool:
        return participant_id in self.participant_ids

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'member_ids': list(self.member_ids),
            'currency': self.currency
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Group':
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            member_ids=[str(m) for m in data.get('member_ids', []) if str(m) != Config.OWNER_ID],
            currency=data.get('currency') or Config.DEFAULT_CURRENCY
        )


@dataclass
class Split:
    """One participant's share of a single expense"""
    participant_id: str
    amount: Decimal
    percentage: Optional[Decimal] = None

    def to_dict(self):
        data = {
            'participant_id': self.participant_id,
            'amount': money_str(self.amount)
        }
        if self.percentage is not None:
            data['percentage'] = str(self.percentage.quantize(Decimal('0.01')))
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Split':
        percentage = data.get('percentage')
        return cls(
            participant_id=str(data['participant_id']),
            amount=to_money(data['amount']),
            percentage=Decimal(str(percentage)) if percentage is not None else None
        )


@dataclass
class Expense:
    """Represents an expense record with its stored splits"""
    id: str
    group_id: str
    description: str
    amount: Decimal
    paid_by: str
    split_type: SplitType
    splits: List[Split]
    date: date

    def to_dict(self):
        return {
            'id': self.id,
            'group_id': self.group_id,
            'description': self.description,
            'amount': money_str(self.amount),
            'paid_by': self.paid_by,
            'split_type': self.split_type.value,
            'splits': [s.to_dict() for s in self.splits],
            'date': self.date.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Expense':
        raw_date = data.get('date')
        return cls(
            id=str(data['id']),
            group_id=str(data['group_id']),
            description=data.get('description', '').strip(),
            amount=to_money(data['amount']),
            paid_by=str(data['paid_by']),
            split_type=SplitType(data.get('split_type', SplitType.EQUAL.value)),
            splits=[Split.from_dict(s) for s in data.get('splits', [])],
            date=date.fromisoformat(raw_date) if raw_date else date.today()
        )


@dataclass(frozen=True)
class SettlementRecord:
    """
    A real-world payment the user confirmed as done. Never mutated.

    from_person and to_person hold participant ids, not display names,
    because balance maps and settlement instructions are keyed by id.
    """
    id: str
    group_id: str
    from_person: str
    to_person: str
    amount: Decimal
    created_at: datetime

    def to_dict(self):
        return {
            'id': self.id,
            'group_id': self.group_id,
            'from_person': self.from_person,
            'to_person': self.to_person,
            'amount': money_str(self.amount),
            'created_at': self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SettlementRecord':
        created_at = data.get('created_at')
        return cls(
            id=str(data['id']),
            group_id=str(data['group_id']),
            from_person=str(data['from_person']),
            to_person=str(data['to_person']),
            amount=to_money(data['amount']),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now()
        )


@dataclass(frozen=True)
class SettlementInstruction:
    """A recommended payment from a debtor to a creditor"""
    from_person: str
    to_person: str
    amount: Decimal

    def to_dict(self):
        return {
            'from_person': self.from_person,
            'to_person': self.to_person,
            'amount': money_str(self.amount)
        }


@dataclass
class Balance:
    """
    Paid and owed come from expenses only. Recorded settlements are kept
    apart in settled_out / settled_in so the expense totals never drift.
    """
    paid: Decimal = ZERO
    owed: Decimal = ZERO
    settled_out: Decimal = ZERO
    settled_in: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        # Positive means others owe this participant
        return self.paid - self.owed + self.settled_out - self.settled_in

    def to_dict(self):
        return {
            'paid': money_str(self.paid),
            'owed': money_str(self.owed),
            'settled_out': money_str(self.settled_out),
            'settled_in': money_str(self.settled_in),
            'net': money_str(self.net)
        }


@dataclass(frozen=True)
class ManualPercentage:
    """A percentage the user typed in"""
    value: Decimal

    manual = True


@dataclass(frozen=True)
class AutoPercentage:
    """A percentage filled in from whatever the manual entries leave over"""
    value: Decimal

    manual = False


PercentageEntry = Union[ManualPercentage, AutoPercentage]


@dataclass(frozen=True)
class ValidationError:
    """Describes why an input was rejected. Returned, never raised."""
    field: str
    message: str

    def to_dict(self):
        return {
            'field': self.field,
            'message': self.message
        }


@dataclass
class SplitResult:
    """Output of the split calculator"""
    splits: List[Split] = field(default_factory=list)
    error: Optional[ValidationError] = None
    allocated: Decimal = ZERO
    remaining: Decimal = ZERO

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self):
        return {
            'splits': [s.to_dict() for s in self.splits],
            'allocated': money_str(self.allocated),
            'remaining': money_str(self.remaining),
            'error': self.error.to_dict() if self.error else None
        }
