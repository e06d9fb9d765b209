"""
Pytest fixtures and test configuration for yipcvars tests.
"""

import json

import pytest

from yipcvars.config import get_settings
from yipcvars.storage import MemoryCvarStore, SQLiteCvarStore, create_database

VALID_VARS = {
    "authsuffix": "yipadmin",
    "authlimit": "60",
    "authcost": "12",
    "pathlogin": "/cgi-bin/yiplogin.pl",
    "pathlogout": "/cgi-bin/yiplogout.pl",
    "pathreset": "/cgi-bin/yipreset.pl",
    "pathadmin": "/cgi-bin/yipadmin.pl",
    "pathlist": "/cgi-bin/yiplist.pl",
    "pathdrop": "/cgi-bin/yipdrop.pl",
    "pathedit": "/cgi-bin/yipedit.pl",
    "pathupload": "/cgi-bin/yipupload.pl",
    "pathimport": "/cgi-bin/yipimport.pl",
    "pathdownload": "/cgi-bin/yipdownload.pl",
    "pathexport": "/cgi-bin/yipexport.pl",
    "pathgenuid": "/cgi-bin/yipgenuid.pl",
}


@pytest.fixture
def valid_vars():
    """A complete mapping of all 15 bulk-writable variables."""
    return dict(VALID_VARS)


@pytest.fixture
def valid_vars_json(valid_vars):
    return json.dumps(valid_vars).encode("utf-8")


@pytest.fixture
def db_path(tmp_path):
    """A freshly provisioned database with an empty cvars table."""
    return create_database(tmp_path / "yip.sqlite")


@pytest.fixture
def sqlite_store(db_path):
    store = SQLiteCvarStore(db_path)
    yield store
    store.close()


@pytest.fixture
def raw_sqlite_store(db_path):
    """SQLite store with no commit hooks, so lastmod only changes when a verb writes it."""
    store = SQLiteCvarStore(db_path, commit_hooks=[])
    yield store
    store.close()


@pytest.fixture
def memory_store():
    return MemoryCvarStore()


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch):
    """Keep cached settings and YIP_* variables from leaking between tests."""
    monkeypatch.delenv("YIP_DB_PATH", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
