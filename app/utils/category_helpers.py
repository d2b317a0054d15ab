from uuid import UUID

from sqlmodel import Session, select

from app.models.transaction import Transaction

FALLBACK_CATEGORY = "Miscellaneous"

DEFAULT_EXPENSE_CATEGORIES = [
    "Food",
    "Shopping",
    "Bills",
    "Subscriptions",
    "Transportation",
    "Entertainment",
    "Groceries",
    FALLBACK_CATEGORY,
]

DEFAULT_INCOME_CATEGORIES = [
    "Salary",
    "Freelance / Side Gig",
    "Investment Returns",
    "Gifts",
    "Refunds",
]


def list_categories(session: Session, user_id: UUID, *, is_income: bool) -> list[str]:
    """Categorías por defecto + las usadas por el usuario, sin duplicados y ordenadas."""
    defaults = DEFAULT_INCOME_CATEGORIES if is_income else DEFAULT_EXPENSE_CATEGORIES
    used = session.exec(
        select(Transaction.category)
        .where(
            Transaction.user_id == user_id,
            Transaction.is_income == is_income,
            Transaction.is_deleted == False,  # noqa: E712
        )
        .distinct()
    ).all()
    return sorted(set(defaults) | {c for c in used if c})


def reassign_category(session: Session, user_id: UUID, category: str) -> int:
    """Mueve todas las transacciones de `category` a Miscellaneous. Devuelve cuántas cambió."""
    transactions = session.exec(
        select(Transaction).where(
            Transaction.user_id == user_id,
            Transaction.category == category,
        )
    ).all()
    for tx in transactions:
        tx.category = FALLBACK_CATEGORY
        session.add(tx)
    session.commit()
    return len(transactions)
