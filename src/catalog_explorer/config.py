"""
Central configuration for the catalog explorer.
"""
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    data_dir: Path = Path("data")
    category: str = "transmission"
    keyword_prefix: str = Field("keyword_", description="Prefix carried by keyword node ids.")
    # Three discovery paths, three thresholds. Keep them separate.
    keyword_threshold: float = Field(0.6, description="Threshold for keywords typed by a user.")
    concept_threshold: float = Field(0.0, description="Threshold when browsing a concept.")
    situation_threshold: float = Field(0.5, description="Threshold for curated situations.")
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def matching_results_path(self) -> Path:
        return self.data_dir / f"{self.category}_matching_results.json"

    def knowledge_graph_path(self) -> Path:
        return self.data_dir / f"{self.category}_knowledge_graph.json"

    def situations_path(self) -> Path:
        return self.data_dir / "situations.json"

    def faq_path(self) -> Path:
        """
        The transmission catalog ships the plain faq.json, other categories are prefixed.
        """
        if self.category == "transmission":
            return self.data_dir / "faq.json"
        return self.data_dir / f"{self.category}_faq.json"


settings = Settings()
