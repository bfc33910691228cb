#!/usr/bin/env python3
"""Create the clients, jobs and settings_history tables.

Usage:
    python3 scripts/init_db.py [--host HOST] [--database NAME]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import Config
from services.database import ConnectionManager, init_schema

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Initialize the PostgreSQL schema')
    parser.add_argument('--host', type=str, help='Database host (default: DB_HOST)')
    parser.add_argument('--database', type=str, help='Database name (default: DB_NAME)')
    args = parser.parse_args()

    db_params = Config.get_db_params()
    if args.host:
        db_params['host'] = args.host
    if args.database:
        db_params['database'] = args.database

    try:
        init_schema(ConnectionManager(db_params))
    except Exception as e:
        logger.error(f"Schema initialization failed: {e}")
        return 1

    print(f"✅ Schema ready on {db_params['host']}/{db_params['database']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
