import re
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StoreError
from ..models import AuditLog, Guest

_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def normalize_consumption_date(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value if _DATE.match(value) else None


@dataclass(frozen=True)
class EntitlementRecord:
    guest_id: str
    name: str
    room: str
    has_breakfast: bool
    consumption_date: Optional[str]
    company: str = ''
    check_in: str = ''
    check_out: str = ''
    tariff: str = ''
    plan: str = ''

    @classmethod
    def from_row(cls, row: Guest) -> 'EntitlementRecord':
        return cls(
            guest_id=str(row.id),
            name=row.name or '',
            room=row.room or '',
            has_breakfast=bool(row.has_breakfast),
            consumption_date=normalize_consumption_date(row.consumption_date),
            company=row.company or '',
            check_in=row.check_in or '',
            check_out=row.check_out or '',
            tariff=row.tariff or '',
            plan=row.plan or '',
        )

    def used_on(self, today: str) -> bool:
        return self.consumption_date == today

    def to_dict(self, today: str) -> dict:
        return {
            'id': self.guest_id,
            'name': self.name,
            'room': self.room,
            'company': self.company,
            'check_in': self.check_in,
            'check_out': self.check_out,
            'tariff': self.tariff,
            'plan': self.plan,
            'has_breakfast': self.has_breakfast,
            'used_today': self.used_on(today),
            'consumption_date': self.consumption_date,
        }

    def to_public_dict(self, today: str) -> dict:
        return {
            'id': self.guest_id,
            'name': self.name,
            'has_breakfast': self.has_breakfast,
            'used_today': self.used_on(today),
        }


class SqlEntitlementStore:
    """Guest directory backed by the ``guest`` table.

    ``consume_if_available`` is a single conditional UPDATE, so concurrent
    redemptions from any number of processes are serialized by the database.
    """

    def __init__(self, session):
        self.session = session

    def get(self, guest_id: str) -> Optional[EntitlementRecord]:
        try:
            row = self.session.get(Guest, guest_id)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(str(exc)) from exc
        return EntitlementRecord.from_row(row) if row is not None else None

    def list_by_room(self, room: str) -> List[EntitlementRecord]:
        stmt = select(Guest).where(Guest.room == room).order_by(Guest.name)
        try:
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(str(exc)) from exc
        return [EntitlementRecord.from_row(r) for r in rows]

    def consume_if_available(self, guest_id: str, today: str, actor: Optional[str] = None) -> Optional[EntitlementRecord]:
        """Mark today's breakfast as used. Returns None when the predicate did not hold."""
        stmt = (
            update(Guest)
            .where(
                Guest.id == guest_id,
                Guest.has_breakfast.is_(True),
                or_(Guest.consumption_date.is_(None), Guest.consumption_date != today),
            )
            .values(consumption_date=today)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
            if result.rowcount != 1:
                self.session.rollback()
                return None
            self.session.add(AuditLog(
                actor_type='staff',
                actor_id=actor,
                event_type='breakfast.consumed',
                payload_json={'guest_id': guest_id, 'date': today},
            ))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(str(exc)) from exc
        return self.get(guest_id)
