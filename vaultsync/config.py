"""Vault Sync Server Configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Vault Sync"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8765
    debug: bool = False
    log_level: str = "INFO"

    # Paths
    data_dir: Path = Path.home() / ".vault"
    devices_file: Path = Path.home() / ".vault" / "mobile-devices.json"
    db_path: Path = Path.home() / ".vault" / "library.db"
    thumbnail_dir: Path = Path.home() / ".vault" / "thumbs"

    # Pairing
    pairing_code_length: int = 6
    pairing_code_ttl_seconds: int = 300  # 5 minutes

    # Library
    library_page_limit: int = 50
    library_max_limit: int = 100
    thumbnail_size: int = 400

    # Sync
    history_dedup_window_ms: int = 1000

    model_config = {"env_prefix": "VAULTSYNC_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.devices_file.parent, self.db_path.parent, self.thumbnail_dir]:
            d.mkdir(parents=True, exist_ok=True)


settings = Settings()
