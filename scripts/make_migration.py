#!/usr/bin/env python
"""Create a new Alembic revision from the TasteBox ORM models.

Usage: python scripts/make_migration.py "message" [--empty]
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
    args = [arg for arg in sys.argv[1:] if arg != "--empty"]
    if not args:
        logger.error('Usage: python scripts/make_migration.py "message" [--empty]')
        sys.exit(1)

    repo_root = Path(__file__).resolve().parents[1]
    env_path = repo_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    migrations_url = os.getenv("MIGRATIONS_DATABASE_URL")
    if migrations_url:
        os.environ["DATABASE_URL"] = migrations_url

    cmd = [sys.executable, "-m", "alembic", "revision", "-m", args[0]]
    if "--empty" not in sys.argv:
        cmd.insert(4, "--autogenerate")
    result = subprocess.run(cmd, cwd=repo_root)
    sys.exit(result.returncode)


if __name__ == "__main__":
    main()
