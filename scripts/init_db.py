"""
Initialize the SQLite database schema
Creates the leads and page_views tables if they do not exist
"""
import sys
import os

# Add parent directory to path to import backend modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import DATABASE_URL
from core.errors import StorageError
from core.store import Store


def init_database(database_url: str = DATABASE_URL):
    """Create all tables in the database"""
    store = Store(database_url)
    print(f"Creating tables in {store.url} ...")
    try:
        store.create_schema()
        print("✓ Tables created successfully!")
        print("\nCreated tables:")
        print("  - leads")
        print("  - page_views")
    except StorageError as e:
        print(f"✗ Error creating tables: {e}")
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    init_database(sys.argv[1] if len(sys.argv) > 1 else DATABASE_URL)
