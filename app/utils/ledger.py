"""
Agregaciones de solo lectura sobre las transacciones no eliminadas de un usuario.

Un grupo sin filas no aparece en el resultado (no se devuelve un 0): quien
consulta debe asumir 0 cuando falte una clave esperada.
"""
import datetime as dt
from collections import defaultdict
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select, func

from app.models.transaction import Transaction
from app.utils.clock import utcnow


def active_transactions(user_id: UUID):
    """Query base: transacciones del usuario sin las eliminadas."""
    return select(Transaction).where(
        Transaction.user_id == user_id,
        Transaction.is_deleted == False,  # noqa: E712
    )


def category_totals(
    session: Session,
    user_id: UUID,
    *,
    is_income: bool,
    start: Optional[dt.datetime] = None,
    end: Optional[dt.datetime] = None,
    category: Optional[str] = None,
) -> dict[str, float]:
    """Suma de `cost` agrupada por categoría."""
    query = (
        select(Transaction.category, func.sum(Transaction.cost))
        .where(
            Transaction.user_id == user_id,
            Transaction.is_deleted == False,  # noqa: E712
            Transaction.is_income == is_income,
        )
        .group_by(Transaction.category)
    )
    if start is not None:
        query = query.where(Transaction.added_on >= start)
    if end is not None:
        query = query.where(Transaction.added_on <= end)
    if category is not None:
        query = query.where(Transaction.category == category)

    return {name: float(total) for name, total in session.exec(query).all()}


def daily_totals(
    session: Session,
    user_id: UUID,
    *,
    is_income: bool,
    days: int = 30,
    now: Optional[dt.datetime] = None,
) -> list[dict]:
    """Suma de `cost` por día (YYYY-MM-DD) en la ventana de los últimos `days` días, ascendente."""
    since = (now or utcnow()) - dt.timedelta(days=days)
    rows = session.exec(
        select(Transaction.added_on, Transaction.cost).where(
            Transaction.user_id == user_id,
            Transaction.is_deleted == False,  # noqa: E712
            Transaction.is_income == is_income,
            Transaction.added_on >= since,
        )
    ).all()

    by_day = defaultdict(float)
    for added_on, cost in rows:
        by_day[added_on.date().isoformat()] += cost

    return [{"date": day, "total": total} for day, total in sorted(by_day.items())]


def totals_by_type(session: Session, user_id: UUID) -> tuple[float, float]:
    """(ingresos, gastos) totales del usuario."""
    rows = session.exec(
        select(Transaction.is_income, func.sum(Transaction.cost))
        .where(
            Transaction.user_id == user_id,
            Transaction.is_deleted == False,  # noqa: E712
        )
        .group_by(Transaction.is_income)
    ).all()

    totals = {bool(is_income): float(total) for is_income, total in rows}
    return totals.get(True, 0.0), totals.get(False, 0.0)


def recent_transactions(session: Session, user_id: UUID, limit: int = 5) -> list[Transaction]:
    return session.exec(
        active_transactions(user_id).order_by(Transaction.added_on.desc()).limit(limit)
    ).all()


def build_summary(session: Session, user_id: UUID) -> dict:
    total_income, total_expenses = totals_by_type(session, user_id)
    return {
        "total_income": total_income,
        "total_expenses": total_expenses,
        "balance": total_income - total_expenses,
        "recent_transactions": recent_transactions(session, user_id),
    }

