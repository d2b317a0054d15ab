import datetime as dt
import logging
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from app.models.recurring_transaction import RecurringTransaction
from app.models.transaction import Transaction
from app.utils.clock import utcnow
from app.utils.dates import calculate_next_due_date, to_datetime

logger = logging.getLogger(__name__)

FORECAST_DAYS = 30


def _frequency_key(frequency):
    return getattr(frequency, "value", frequency)


def recompute_next_due_date(
    recurring: RecurringTransaction,
    start_date: Optional[dt.datetime] = None,
    frequency=None,
) -> dt.datetime:
    """
    Recalcula next_due_date cuando un update trae start_date y/o frequency.

    - Si start_date cambió: se calcula desde la nueva fecha de inicio.
    - Si no: se calcula desde el next_due_date actual (o start_date si no hay),
      así que varios cambios solo de frecuencia avanzan la fecha de forma acumulada.
    - Si ni start_date ni frequency cambiaron se conserva next_due_date
      (el formulario reenvía ambos en cada edición).
    """
    new_frequency = frequency or recurring.frequency
    current_start = to_datetime(recurring.start_date)

    start_changed = start_date is not None and to_datetime(start_date) != current_start
    frequency_changed = _frequency_key(new_frequency) != _frequency_key(recurring.frequency)

    if not start_changed and not frequency_changed and recurring.next_due_date:
        return recurring.next_due_date

    if start_changed:
        base = start_date
    else:
        base = recurring.next_due_date or current_start

    return calculate_next_due_date(base, new_frequency)


def upcoming_recurring(
    session: Session,
    user_id: UUID,
    now: Optional[dt.datetime] = None,
    limit: int = 10,
) -> list[RecurringTransaction]:
    """Recurrentes con next_due_date en [now, now + 30 días], ascendente."""
    now = now or utcnow()
    return session.exec(
        select(RecurringTransaction)
        .where(
            RecurringTransaction.user_id == user_id,
            RecurringTransaction.next_due_date >= now,
            RecurringTransaction.next_due_date <= now + dt.timedelta(days=FORECAST_DAYS),
        )
        .order_by(RecurringTransaction.next_due_date.asc())
        .limit(limit)
    ).all()


def roll_forward_recurring(session: Session, now: Optional[dt.datetime] = None) -> int:
    """
    Registra en el ledger cada ocurrencia vencida y mueve next_due_date un periodo
    a la vez hasta que quede en el futuro. Devuelve cuántas transacciones creó.

    No se ejecuta dentro de ninguna petición: lo llama app.scripts.roll_forward_recurring.
    """
    now = now or utcnow()
    elapsed = session.exec(
        select(RecurringTransaction).where(RecurringTransaction.next_due_date < now)
    ).all()

    created = 0
    for recurring in elapsed:
        due = recurring.next_due_date
        while due < now:
            session.add(Transaction(
                user_id=recurring.user_id,
                name=recurring.name,
                category=recurring.category,
                cost=recurring.amount,
                added_on=due,
                is_income=recurring.is_income,
                note=f"Recurring: {recurring.name}",
            ))
            created += 1
            due = calculate_next_due_date(due, recurring.frequency)

        recurring.next_due_date = due
        session.add(recurring)

    session.commit()
    logger.info("Rolled forward %d recurring transactions (%d occurrences)", len(elapsed), created)
    return created
