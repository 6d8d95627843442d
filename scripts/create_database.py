#!/usr/bin/env python
"""Create the database from `DATABASE_URL` in .env and its tables.

PostgreSQL databases are created through the `postgres` admin database first;
SQLite files are created on first connect.

Usage:
  python scripts/create_database.py [--password PASSWORD] [--skip-tables]
"""
import argparse
import os
import sys
from getpass import getpass

# Ensure project root is on sys.path so `app` package can be imported
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.config import settings
from app.database import create_tables
from sqlalchemy.engine import make_url
import psycopg2
from psycopg2 import sql
from psycopg2 import OperationalError


def create_postgres_database(url, password):
    target_db = url.database
    if not target_db:
        print("No database name found in DATABASE_URL")
        sys.exit(1)

    def try_connect(pw):
        return psycopg2.connect(
            dbname="postgres",
            user=url.username,
            password=pw,
            host=url.host or "localhost",
            port=url.port or 5432,
        )

    try:
        conn = try_connect(password)
    except OperationalError:
        # If interactive terminal, prompt for password fallback
        if not sys.stdin.isatty():
            print("Password authentication failed. Provide the password via --password or POSTGRES_PASSWORD env var.")
            sys.exit(1)
        print("Password authentication failed. Please enter the Postgres password for user:", url.username)
        try:
            conn = try_connect(getpass())
        except OperationalError as e:
            print("Error creating database:", e)
            sys.exit(1)

    conn.autocommit = True
    cur = conn.cursor()
    try:
        cur.execute("SELECT 1 FROM pg_database WHERE datname=%s", (target_db,))
        if cur.fetchone():
            print(f"Database '{target_db}' already exists.")
        else:
            cur.execute(sql.SQL("CREATE DATABASE {};").format(sql.Identifier(target_db)))
            print(f"Database '{target_db}' created.")
    finally:
        cur.close()
        conn.close()


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--password", "-p", help="Postgres admin password")
    parser.add_argument("--skip-tables", action="store_true", help="Only create the database")
    args = parser.parse_args()

    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "postgresql":
        create_postgres_database(url, args.password or os.getenv("POSTGRES_PASSWORD") or url.password)

    if not args.skip_tables:
        create_tables()
        print("Tables created.")


if __name__ == "__main__":
    main()
