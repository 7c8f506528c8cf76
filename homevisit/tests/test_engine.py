"""Tests for engine URL helpers and NullPool engine construction."""
import pytest

from homevisit.config import PostgresConfig
from homevisit.infra.database.engine import async_url, build_engine, build_session_factory, split_admin_url


class TestUrls:
    @pytest.mark.parametrize(
        "url",
        ["postgresql://u:p@db:5432/hv", "postgres://u:p@db:5432/hv", "postgresql+asyncpg://u:p@db:5432/hv"],
    )
    def test_async_url(self, url):
        assert async_url(url) == "postgresql+asyncpg://u:p@db:5432/hv"

    def test_async_url_rejects_garbage(self):
        with pytest.raises(ValueError):
            async_url("not a url")

    def test_split_admin_url(self):
        dbname, admin = split_admin_url("postgresql+asyncpg://u:p@db:5432/homevisit")
        assert dbname == "homevisit"
        assert admin == "postgresql://u:p@db:5432/postgres"

    def test_split_admin_url_without_path(self):
        assert split_admin_url("postgresql://db")[0] == "postgres"


class TestBuildEngine:
    def test_null_pool_engine_uses_asyncpg(self):
        engine = build_engine(PostgresConfig(url="postgresql://u:p@localhost/hv"), use_null_pool=True)
        assert engine.url.drivername == "postgresql+asyncpg"
        assert engine.url.database == "hv"
        assert build_session_factory(engine).kw["expire_on_commit"] is False
