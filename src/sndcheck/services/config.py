# services/config.py
"""
Service for loading and creating sndcheck configuration files.
"""

from pathlib import Path
from typing import List, Optional

from sndcheck.core.config import (
    Config,
    create_default_config_file,
    get_config_locations,
    load_config_cascade,
    validate_config,
)
from sndcheck.core.exceptions import InvalidConfigurationError, SndcheckError

from .base import ServiceResult


class ConfigService:
    """Configuration cascade access for the CLI."""

    def load_config(
        self,
        config_path: Optional[str] = None,
        strict: bool = True,
    ) -> ServiceResult[Config]:
        """
        Load the cascade and validate the merged settings.

        Args:
            config_path: Explicit config file, highest priority
            strict: When False, invalid values are returned as warnings
                instead of failing, so the config can still be inspected

        Returns:
            ServiceResult containing the Config; files that cannot be
            loaded always fail with the configuration exit code
        """
        try:
            config = load_config_cascade(config_path)
        except SndcheckError as e:
            return ServiceResult.from_error(e)

        warnings = []
        try:
            validate_config(config)
        except InvalidConfigurationError as e:
            if strict:
                return ServiceResult.from_error(e)
            warnings.append(str(e))

        return ServiceResult.ok(
            data=config,
            message=f"Loaded config from {config.source or 'defaults'}",
            warnings=warnings,
        )

    def get_config_locations(self) -> ServiceResult[List[Path]]:
        """Search locations, highest priority first."""
        return ServiceResult.ok(data=get_config_locations())

    def create_default_config(
        self,
        filepath: str = "sndcheck.toml",
        force: bool = False,
    ) -> ServiceResult[str]:
        """
        Write the commented default config file.

        Refuses to replace an existing file unless ``force`` is set.
        """
        if Path(filepath).exists() and not force:
            return ServiceResult.fail(f"File already exists: {filepath}. Use --force to overwrite.")
        try:
            written = create_default_config_file(filepath)
        except OSError as e:
            return ServiceResult.fail(f"Cannot write config file {filepath}: {e}")
        return ServiceResult.ok(data=written, message=f"Created config file: {written}")
