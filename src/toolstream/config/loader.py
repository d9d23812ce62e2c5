"""
toolstream configuration management.

Settings are read from toolstream.yaml at the project root. Every field is
optional; a missing default file means "use the defaults".

Example toolstream.yaml:

    denied_tool_patterns: ["^run_", "_python$"]
    credential_params:
      sleepyrat: token
    min_final_length: 120
    dataset_rules:
      - keywords: [compound]
        dataset: Compound list
        information: ["compound names, formulas, retention times"]
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from toolstream.catalog.filters import DEFAULT_DENIED_PATTERNS
from toolstream.catalog.merger import CatalogOptions
from toolstream.context.labels import DatasetRule, KeywordDatasetLabeler
from toolstream.context.ledger import DataContextLedger
from toolstream.context.summary import DEFAULT_ITEMS_PER_CATEGORY, summarize
from toolstream.core.errors import ConfigError
from toolstream.events.normalizer import TransportConventions
from toolstream.phase.classifier import (
    DEFAULT_ANSWER_DELIMITER,
    DEFAULT_MIN_FINAL_LENGTH,
    ClassifierOptions,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "toolstream.yaml"


class ToolstreamConfig(BaseModel):
    """All toolstream settings with their defaults."""

    denied_tool_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DENIED_PATTERNS),
        description="Case-insensitive regexes; matching tools are never exposed",
    )
    credential_params: dict[str, str] = Field(
        default_factory=lambda: {"sleepyrat": "token"},
        description="Backend → parameter that carries its credential out of band",
    )
    local_prefixes: list[str] = Field(default_factory=lambda: ["uv-mcp__"])
    remote_prefixes: list[str] = Field(default_factory=lambda: ["railway-", "sleepyrat__"])
    min_final_length: int = Field(DEFAULT_MIN_FINAL_LENGTH, ge=0)
    answer_delimiter: str = DEFAULT_ANSWER_DELIMITER
    summary_budget: int = Field(2000, gt=0)
    summary_items_per_category: int = Field(DEFAULT_ITEMS_PER_CATEGORY, ge=1)
    max_resource_size: int = Field(50_000, gt=0)
    enable_synthetic_tools: bool = True
    dataset_rules: list[DatasetRule] = Field(default_factory=list)

    @field_validator("denied_tool_patterns")
    @classmethod
    def _patterns_compile(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid denylist pattern {pattern!r}: {e}") from e
        return patterns

    def classifier_options(self) -> ClassifierOptions:
        return ClassifierOptions(
            min_final_length=self.min_final_length,
            answer_delimiter=self.answer_delimiter,
        )

    def catalog_options(self) -> CatalogOptions:
        return CatalogOptions(
            denied_patterns=tuple(self.denied_tool_patterns),
            credential_params=dict(self.credential_params),
            enable_synthetic_tools=self.enable_synthetic_tools,
            max_resource_size=self.max_resource_size,
        )

    def transport_conventions(self) -> TransportConventions:
        return TransportConventions(
            local_prefixes=tuple(self.local_prefixes),
            remote_prefixes=tuple(self.remote_prefixes),
        )

    def dataset_labeler(self) -> KeywordDatasetLabeler | None:
        if not self.dataset_rules:
            return None
        return KeywordDatasetLabeler(self.dataset_rules)

    def summarize_ledger(self, ledger: DataContextLedger) -> str:
        """Summarize a ledger within the configured budget and item limit."""
        return summarize(
            ledger,
            budget=self.summary_budget,
            items_per_category=self.summary_items_per_category,
        )


def get_config_path() -> Path:
    """
    Get the path to the toolstream configuration file.

    Looks for toolstream.yaml in the current working directory (project root).
    """
    return Path(os.getcwd()) / CONFIG_FILE_NAME


def load_config(path: str | Path | None = None) -> ToolstreamConfig:
    """
    Load toolstream settings from YAML.

    Args:
        path: Explicit config file. Defaults to toolstream.yaml in the
            working directory.

    Returns:
        ToolstreamConfig; defaults when no path is given and the default
        file does not exist

    Raises:
        FileNotFoundError: If an explicit `path` doesn't exist
        ConfigError: If the file is not valid YAML or has invalid settings
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"{config_path.name} not found at {config_path}.")
    else:
        config_path = get_config_path()
        if not config_path.exists():
            logger.debug(f"No config at {config_path}, using defaults")
            return ToolstreamConfig()

    logger.debug(f"Loading config from: {config_path}")
    try:
        with open(config_path, "r") as f:
            raw: Any = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a mapping at the top of {config_path}, got {type(raw).__name__}"
        )

    try:
        return ToolstreamConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {config_path}: {e}") from e
