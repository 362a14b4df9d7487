"""Filter configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_templates_path() -> str:
    """Return the directory holding the bundled wrapper templates."""
    return str((Path(__file__).parent / "templates").resolve())


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Filter settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ALLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Host file serving
    wwwroot: str = "http://localhost"
    file_script: str = "pluginfile.php"
    slash_arguments: bool = True  # False: files are served as ?file=/...

    # Comma-separated context levels whose files are never decorated
    blacklisted_contexts: str = "system,coursecat,user"

    # Components whose URLs carry positional ids before the file path
    item_id_components: str = "label"
    double_id_components: str = "question"

    # Capabilities
    author_capability: str = "course:manageactivities"
    feedback_capability: str = "ally:viewfeedback"
    view_hidden_activities_capability: str = "course:viewhiddenactivities"
    view_hidden_courses_capability: str = "course:viewhiddencourses"

    # Forum attachments are only mapped when their mimetype starts with this
    image_mimetype_prefix: str = "image/"

    # Wrapper templates - defaults to the bundled templates/ directory
    templates_path: str = ""

    # Debug mode
    debug: bool = False

    @property
    def blacklisted_contexts_list(self) -> list[str]:
        """Return blacklisted context level names as a list."""
        return [level.lower() for level in _split_csv(self.blacklisted_contexts)]

    @property
    def item_id_components_list(self) -> list[str]:
        """Return components with a single item id segment."""
        return _split_csv(self.item_id_components)

    @property
    def double_id_components_list(self) -> list[str]:
        """Return components with two extra id segments before the item id."""
        return _split_csv(self.double_id_components)

    @property
    def file_base_url(self) -> str:
        """Return the absolute URL of the file-serving script."""
        return f"{self.wwwroot.rstrip('/')}/{self.file_script}"

    @property
    def resolved_templates_path(self) -> str:
        """Return templates path, using the bundled one if not set."""
        if self.templates_path:
            return self.templates_path
        return _default_templates_path()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging for scripts embedding the filter."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
