import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import settings
from data.database import init_db


def main():
    print(f"Initializing database at {settings.DATABASE_URL} ...")
    init_db()
    print("Database initialized successfully.")


if __name__ == "__main__":
    main()
