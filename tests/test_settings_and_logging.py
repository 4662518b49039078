import sys
from pathlib import Path

import pytest
from loguru import logger

from daostore.config import DaoStoreSettings
from daostore.core.logging import configure_logging
from daostore.core.persistence.config import PersistenceConfig, PersistenceMode
from daostore.core.persistence.kv_store import MemoryKeyValueStore
from daostore.governance.record_store import dao_record_store


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_default_settings():
    settings = DaoStoreSettings()
    assert settings.log_level == "INFO"
    assert settings.namespace == "daostore"
    assert settings.persistence_config.mode is PersistenceMode.MEMORY


def test_settings_from_env():
    settings = DaoStoreSettings.from_env(
        {
            "DAOSTORE_LOG_LEVEL": "debug",
            "DAOSTORE_PERSISTENCE": "SQLite",
            "DAOSTORE_DATA_DIR": "/srv/dao",
            "DAOSTORE_NAMESPACE": "tenant-a",
            "DAOSTORE_DEBUG_SCOPES": "governance, ,core.persistence",
        }
    )
    assert settings.log_level == "DEBUG"
    assert settings.namespace == "tenant-a"
    assert settings.debug_scopes == ("governance", "core.persistence")
    assert settings.persistence_config.mode is PersistenceMode.SQLITE
    assert settings.persistence_config.sqlite_path() == Path(
        "/srv/dao/daostore.sqlite"
    )


def test_settings_reject_unknown_persistence_mode():
    with pytest.raises(ValueError):
        DaoStoreSettings.from_env({"DAOSTORE_PERSISTENCE": "postgres"})


def test_sqlite_path_uses_data_dir(tmp_path):
    config = PersistenceConfig(data_dir=tmp_path, sqlite_filename="x.sqlite")
    assert config.sqlite_path() == tmp_path / "x.sqlite"


def test_configure_logging_handler_count():
    assert len(configure_logging("INFO")) == 1
    assert len(configure_logging("DEBUG", debug_scopes=("governance",))) == 1
    assert len(configure_logging("INFO", debug_scopes=("governance", " "))) == 2


@pytest.mark.asyncio
async def test_debug_scope_lets_module_debug_through(capsys):
    configure_logging("INFO", debug_scopes=("governance",))
    store = dao_record_store(MemoryKeyValueStore())

    await store.remove_many(["a", "b"])
    logger.debug("outside any scope")

    err = capsys.readouterr().err
    assert "Removing 2 dao records" in err
    assert "outside any scope" not in err
