"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and SIGSTAGE_* environment variables. Only the CLI
reads the module-level singleton; library code receives every value as an
explicit parameter.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class StagerConfig(BaseSettings):
    """Staging configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SIGSTAGE_OUTPUT_DIR=/tmp/upload
        export SIGSTAGE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SIGSTAGE_",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "WARNING"

    # Staging
    output_dir: Path = Path("target/gha-prepared-artifacts")
    attestation_suffix: str = ".sigstore.json"
    hash_chunk_size: PositiveInt = 64 * 1024

    # Two artifacts with identical bytes cannot be told apart by digest
    reject_duplicate_digests: bool = True


# Module-level singleton — import as `from sigstage.config import config`
config = StagerConfig()
