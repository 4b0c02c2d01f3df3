"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'catalog' in data:
            flattened['catalog_path'] = data['catalog'].get('path')
        if 'storage' in data:
            flattened['data_dir'] = data['storage'].get('data_dir')
            flattened['max_submissions_per_user'] = (
                data['storage'].get('max_submissions_per_user')
            )
        if 'progress' in data:
            progress = data['progress']
            flattened['timezone'] = progress.get('timezone')
            flattened['intermediate_points'] = progress.get('intermediate_points')
            flattened['advanced_points'] = progress.get('advanced_points')
            flattened['intermediate_templates'] = progress.get('intermediate_templates')
            flattened['advanced_templates'] = progress.get('advanced_templates')
        if 'feed' in data:
            flattened['feed_default_limit'] = data['feed'].get('default_limit')
            flattened['feed_max_limit'] = data['feed'].get('max_limit')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Authentication (optional: None disables auth)
    app_secret: str | None = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Catalog and storage, relative paths resolve against the project root
    catalog_path: Path = Field(default=Path("config/catalog/projects.yaml"))
    data_dir: Path = Field(default=Path("data/submissions"))
    max_submissions_per_user: int = Field(default=5000, gt=0)

    # Progress
    timezone: str = Field(default="UTC")
    intermediate_points: int = Field(default=300, ge=0)
    advanced_points: int = Field(default=800, ge=0)
    intermediate_templates: int = Field(default=3, ge=1)
    advanced_templates: int = Field(default=2, ge=1)

    # Activity feed
    feed_default_limit: int = Field(default=5, ge=1)
    feed_max_limit: int = Field(default=50, ge=1)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def catalog_file(self) -> Path:
        if self.catalog_path.is_absolute():
            return self.catalog_path
        return self.project_root / self.catalog_path

    @property
    def submissions_dir(self) -> Path:
        d = self.data_dir if self.data_dir.is_absolute() else self.project_root / self.data_dir
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()


def load_catalog_data(path: Path) -> list[dict]:
    """Load raw project template records from a catalog YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")
    with open(path, encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    return data.get('projects', [])
