#!/usr/bin/env python3
"""
Book Collection Utility

This script provides utilities to inspect the books collection:
- List all books, newest first
- Create the collection indexes
- Report books whose names collide ignoring case
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from motor.motor_asyncio import AsyncIOMotorClient

from api.config import config
from api.database import MongoBookRepository
from utilities.logger import setup_logging


def open_repository():
    """Connect to MongoDB and wrap the books collection."""
    client = AsyncIOMotorClient(config.mongodb_url)
    repository = MongoBookRepository(client[config.mongodb_database], config.books_collection)
    return client, repository


async def list_books():
    """List all books in the database."""
    print("\n" + "=" * 80)
    print("📚 ALL BOOKS")
    print("=" * 80)

    client, repository = open_repository()
    try:
        books = await repository.list_all()
        if not books:
            print("❌ No books found in database")
            return

        print(f"✅ Found {len(books)} books:")
        print()
        for i, book in enumerate(books, 1):
            print(f"{i:3d}. {book.name} by {book.author}")
            print(f"     ID: {book.id}")
            print(f"     Price: {book.formatted_price}")
            print(f"     Created: {book.created_at}")
            print()
    except Exception as e:
        print(f"❌ Error listing books: {e}")
    finally:
        client.close()


async def create_indexes(unique_names: bool):
    """Create the indexes used by the API."""
    client, repository = open_repository()
    try:
        await repository.ensure_indexes(unique_names=unique_names)
        print(f"✅ Indexes created (unique names: {unique_names})")
    except Exception as e:
        print(f"❌ Error creating indexes: {e}")
        print("   A unique name index fails while duplicates exist; run 'duplicates' first.")
    finally:
        client.close()


async def find_duplicates():
    """Report names shared by more than one book, under the name collation."""
    client, repository = open_repository()
    try:
        collisions = await repository.find_name_collisions()
        if not collisions:
            print("✅ No duplicate names found")
            return

        print(f"⚠️  {len(collisions)} names are used by more than one book:")
        for books in collisions:
            print()
            for book in books:
                print(f"  - {book.name!r} (ID: {book.id}, created {book.created_at})")
    except Exception as e:
        print(f"❌ Error checking duplicates: {e}")
    finally:
        client.close()


async def main():
    """Main function."""
    if len(sys.argv) < 2:
        print("Usage: python manage_books.py [list|indexes|duplicates] [--unique-names]")
        print()
        print("Commands:")
        print("  list        - List all books")
        print("  indexes     - Create collection indexes")
        print("  duplicates  - Report names used by more than one book")
        print()
        print("Examples:")
        print("  python manage_books.py list")
        print("  python manage_books.py indexes --unique-names")
        sys.exit(1)

    command = sys.argv[1].lower()

    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )

    if command == "list":
        await list_books()
    elif command == "indexes":
        unique = "--unique-names" in sys.argv[2:] or config.enforce_unique_names
        await create_indexes(unique)
    elif command == "duplicates":
        await find_duplicates()
    else:
        print(f"❌ Unknown command: {command}")
        print("Available commands: list, indexes, duplicates")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
