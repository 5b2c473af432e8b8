#!/usr/bin/env python3
"""Inspect workflow_cache rows per source.

Usage:
    python scripts/inspect_cache.py
    python scripts/inspect_cache.py n8n.io
    python scripts/inspect_cache.py github --version 1.0.0

Without a source, lists every row with artifact counts and fetch times.
With a source, also prints its stats and the first few artifacts (shard
rows such as "n8n.io#1" are included).
"""

import argparse
import json
import os
import sys

import psycopg2
from dotenv import load_dotenv
from psycopg2.extras import RealDictCursor

load_dotenv()

SAMPLE_SIZE = 5


def get_connection():
    """Create database connection."""
    return psycopg2.connect(
        host=os.environ["POSTGRES_HOST"],
        port=os.environ["POSTGRES_PORT"],
        user=os.environ["POSTGRES_USER"],
        password=os.environ["POSTGRES_PASSWORD"],
        dbname=os.environ["POSTGRES_DB"],
    )


def list_rows(cur, version: str | None) -> None:
    query = """
        SELECT version, source, jsonb_array_length(workflows) AS artifacts, last_fetch_time
        FROM workflow_cache
    """
    params: tuple = ()
    if version:
        query += " WHERE version = %s"
        params = (version,)
    cur.execute(query + " ORDER BY version, source", params)
    rows = cur.fetchall()
    if not rows:
        print("workflow_cache is empty")
        return
    print(f"{'VERSION':<10} {'SOURCE':<28} {'ARTIFACTS':>9}  LAST FETCH")
    for row in rows:
        print(f"{row['version']:<10} {row['source']:<28} {row['artifacts']:>9}  {row['last_fetch_time']}")


def show_source(cur, source: str, version: str | None) -> None:
    query = """
        SELECT version, source, stats, workflows, last_fetch_time
        FROM workflow_cache
        WHERE (source = %s OR source LIKE %s)
    """
    params: list = [source, f"{source}#%"]
    if version:
        query += " AND version = %s"
        params.append(version)
    cur.execute(query + " ORDER BY source", params)
    rows = cur.fetchall()
    if not rows:
        print(f"No rows for source '{source}'")
        return
    for row in rows:
        workflows = row["workflows"] or []
        print("=" * 70)
        print(f"{row['source']} (version {row['version']}), {len(workflows)} artifacts")
        print(f"Last fetch: {row['last_fetch_time']}")
        print(f"Stats: {json.dumps(row['stats'], indent=2)}")
        for artifact in workflows[:SAMPLE_SIZE]:
            integrations = ", ".join(artifact.get("integrations") or [])
            print(f"  - [{artifact.get('complexity')}] {artifact.get('title')} ({integrations})")


def main():
    parser = argparse.ArgumentParser(description="Inspect workflow_cache rows")
    parser.add_argument("source", nargs="?", help="Source key (github, n8n.io, all, ...)")
    parser.add_argument("--version", help="Only rows of this cache version")
    args = parser.parse_args()

    conn = get_connection()
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            if args.source:
                show_source(cur, args.source, args.version)
            else:
                list_rows(cur, args.version)
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
