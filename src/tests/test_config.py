"""Unit tests for application configuration."""

from pathlib import Path
from unittest.mock import patch

from tinywiki.config import Settings


class TestSettings:
    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            s = Settings(_env_file=None)
            assert s.data_dir == Path("data")
            assert s.database_url is None
            assert s.pool_size == 30
            assert s.port == 8080
            assert s.debug is False
            assert s.app_title == "TinyWiki"

    def test_from_env(self):
        env = {
            "TINYWIKI_DATA_DIR": "/tmp/wiki",
            "TINYWIKI_DEBUG": "true",
            "TINYWIKI_APP_TITLE": "MyWiki",
            "TINYWIKI_POOL_SIZE": "4",
            "TINYWIKI_QUERY_TIMEOUT": "2.5",
        }
        with patch.dict("os.environ", env, clear=True):
            s = Settings(_env_file=None)
            assert s.data_dir == Path("/tmp/wiki")
            assert s.debug is True
            assert s.app_title == "MyWiki"
            assert s.pool_size == 4
            assert s.query_timeout == 2.5

    def test_default_database_url_lives_in_data_dir(self):
        s = Settings(_env_file=None, data_dir=Path("/srv/wiki"))
        assert s.resolved_database_url == "sqlite+aiosqlite:////srv/wiki/wiki.db"

    def test_explicit_database_url_wins(self):
        url = "postgresql+asyncpg://wiki:wiki@db/wiki"
        s = Settings(_env_file=None, database_url=url)
        assert s.resolved_database_url == url
