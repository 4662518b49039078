import os
from dataclasses import dataclass, field
from pathlib import Path

from daostore.core.persistence.config import PersistenceConfig, PersistenceMode
from daostore.datastructures.type_aliases import NamespaceName


@dataclass(slots=True)
class DaoStoreSettings:
    """daostore runtime configuration settings."""

    log_level: str = "INFO"
    debug_scopes: tuple[str, ...] = ()
    log_colorize: bool = False
    namespace: NamespaceName = "daostore"
    persistence_config: PersistenceConfig = field(default_factory=PersistenceConfig)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "DaoStoreSettings":
        """Build settings from ``DAOSTORE_*`` environment variables."""
        env = os.environ if environ is None else environ
        persistence = PersistenceConfig()
        if mode := env.get("DAOSTORE_PERSISTENCE"):
            persistence.mode = PersistenceMode(mode.lower())
        if data_dir := env.get("DAOSTORE_DATA_DIR"):
            persistence.data_dir = Path(data_dir)
        scopes = tuple(
            scope.strip()
            for scope in env.get("DAOSTORE_DEBUG_SCOPES", "").split(",")
            if scope.strip()
        )
        return cls(
            log_level=env.get("DAOSTORE_LOG_LEVEL", "INFO").upper(),
            debug_scopes=scopes,
            namespace=env.get("DAOSTORE_NAMESPACE", "daostore"),
            persistence_config=persistence,
        )
