"""Initialize the database - creates shots/takes/take_snapshots/decision_notes tables."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from app.database import engine, Base
import app.models  # noqa: F401 - registers all models


def init_db():
    print(f"Creating history tables on {settings.DATABASE_URL} ...")
    Base.metadata.create_all(bind=engine)
    for table in Base.metadata.sorted_tables:
        print(f"  - {table.name}")
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
