"""
Avanza los next_due_date vencidos y registra sus ocurrencias en el ledger.

Pensado para correr desde un cron externo:
    python -m app.scripts.roll_forward_recurring
"""
import logging

from sqlmodel import Session

from app.database import create_db_and_tables, engine
from app.utils.recurring_helpers import roll_forward_recurring


def main():
    logging.basicConfig(level=logging.INFO)
    create_db_and_tables()
    with Session(engine) as session:
        created = roll_forward_recurring(session)
    print(f"✅ {created} transacciones recurrentes registradas.")


if __name__ == "__main__":
    main()
