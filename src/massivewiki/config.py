"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    wiki_home: Path = Path("wiki-data")
    debug: bool = False
    app_title: str = "Massive Wiki"
    home_page: str = "home"

    model_config = SettingsConfigDict(
        env_prefix="MASSIVEWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def pages_dir(self) -> Path:
        return self.wiki_home / "pages"

    @property
    def wiki_dir(self) -> Path:
        return self.wiki_home / "_wiki"

    @property
    def images_dir(self) -> Path:
        return self.wiki_home / "images"


settings = Settings()
