#!/usr/bin/env python
"""Upgrade the TasteBox database to the latest (or a given) Alembic revision.

Usage: python scripts/apply_migrations.py [revision]
"""
import logging
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    repo_root = Path(__file__).resolve().parents[1]
    env_path = repo_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    # Host-run migrations may need a different URL than the app container
    migrations_url = os.getenv("MIGRATIONS_DATABASE_URL")
    if migrations_url:
        os.environ["DATABASE_URL"] = migrations_url

    target = sys.argv[1] if len(sys.argv) > 1 else "head"
    database = os.getenv("DATABASE_URL", "sqlite:///./tastebox.db")
    logger.info("Upgrading %s to %s", database.split("@")[-1], target)
    result = subprocess.run([sys.executable, "-m", "alembic", "upgrade", target], cwd=repo_root)
    sys.exit(result.returncode)


if __name__ == "__main__":
    main()
