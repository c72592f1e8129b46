from caseload.backend.src.core.config import get_settings
from caseload.backend.src.db import init_schema


def init_db():
    print(f"Connecting to {get_settings().database_url}")
    init_schema()
    print("Tables created: due_date_items, progress_reports")


if __name__ == "__main__":
    init_db()
