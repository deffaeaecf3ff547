"""Configuration loader for the Lookup reader core."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from lookup_reader.models.rendering import FontFamily


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Lookup Reader"
    version: str = "0.1.0"


class SegmentationConfig(BaseModel):
    """Chapter detection configuration."""

    chapter_keyword: str = Field(default="CHAPTER", min_length=1)
    # Explicit chapter markers, matched with CSS selectors
    heading_selectors: list[str] = Field(
        default_factory=lambda: ["h1.chapter", "h2.chapter", "h3.chapter", "[data-chapter]"]
    )
    # Headings that only count when their text starts with chapter_keyword
    keyword_heading_tags: list[str] = Field(default_factory=lambda: ["h2"])
    paragraph_selectors: list[str] = Field(default_factory=lambda: ["p"])
    subheading_selectors: list[str] = Field(default_factory=lambda: ["h4", "h5", "h6"])
    introduction_title: str = "Introduction"
    html_parser: str = "lxml"


class PaginationConfig(BaseModel):
    """Reader pagination configuration."""

    font_size: float = Field(default=18.0, gt=0)
    min_font_size: float = 12.0
    max_font_size: float = 30.0
    padding: float = Field(default=16.0, ge=0)
    font_family: FontFamily = FontFamily.SYSTEM
    line_height: float = Field(default=1.4, gt=0)
    # Optional TrueType/OpenType files per family; families without one are estimated
    font_paths: dict[FontFamily, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_font_size_bounds(self) -> "PaginationConfig":
        if self.min_font_size > self.max_font_size:
            raise ValueError(
                f"min_font_size {self.min_font_size} is above max_font_size {self.max_font_size}"
            )
        return self


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    sqlite_path: str = "./db/lookup.db"
    books_dir: str = "./data/books"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Override database location from environment
    db_path = os.getenv("LOOKUP_DB_PATH")
    if db_path:
        config.storage.sqlite_path = db_path

    return config
