"""SQL schema for the cvars table and database provisioning.

Only the cvars table is created here. The content tables of a full CMS
database are out of scope for this tool.
"""

import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Union

from yipcvars.types import StoreError

logger = logging.getLogger(__name__)

CVARS_SCHEMA = """
CREATE TABLE cvars(
  cvarsid  INTEGER PRIMARY KEY ASC,
  cvarskey TEXT UNIQUE NOT NULL,
  cvarsval TEXT NOT NULL
);

CREATE UNIQUE INDEX ix_cvars_key
  ON cvars(cvarskey);
"""


def create_database(db_path: Union[str, Path]) -> Path:
    """Create a brand-new database holding only an empty cvars table.

    The path must not exist yet; an existing database is never touched.

    Raises:
        StoreError: If the path already exists or the schema can't be created.
    """
    path = Path(db_path)
    if path.exists():
        raise StoreError(f"Database path already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Creating new database: {path}")
    try:
        with closing(sqlite3.connect(str(path))) as conn:
            conn.executescript(CVARS_SCHEMA)
            conn.commit()
    except sqlite3.Error as e:
        raise StoreError(f"Failed to create database {path}: {e}") from e
    return path
