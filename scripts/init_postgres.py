"""
Check the PostgreSQL database for the storefront API.
Run once before migrating: python scripts/init_postgres.py

Requires: PostgreSQL installed and running. Create user and database:

  sudo -u postgres psql
  CREATE USER storefront WITH PASSWORD 'storefront';
  CREATE DATABASE storefront_db OWNER storefront;
  GRANT ALL PRIVILEGES ON DATABASE storefront_db TO storefront;
  \q

Then apply the schema with: alembic upgrade head
"""

import sys

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import settings


def main():
    url = settings.get_database_url()
    if not url.startswith("postgresql"):
        print("Database URL is not PostgreSQL. Skipping.")
        return
    try:
        engine = create_engine(url)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("PostgreSQL connection OK. Database exists.")
    except SQLAlchemyError as e:
        print(f"Cannot connect to PostgreSQL: {e}")
        print("\nCreate database first:")
        print(f"  psql -U postgres -c \"CREATE USER {settings.POSTGRES_USER} WITH PASSWORD '<password>';\"")
        print(f"  psql -U postgres -c \"CREATE DATABASE {settings.POSTGRES_DB} OWNER {settings.POSTGRES_USER};\"")
        print(f"  psql -U postgres -c \"GRANT ALL PRIVILEGES ON DATABASE {settings.POSTGRES_DB} TO {settings.POSTGRES_USER};\"")
        sys.exit(1)


if __name__ == "__main__":
    main()
