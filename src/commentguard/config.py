"""
Configuration management for commentguard.

Handles loading and saving of the commentguard.yaml file:

    batch_size: 5
    inter_batch_delay_ms: 100
    classify_timeout_s: 30
    debounce_ms: 300
    rescan_interval_ms: 3000
    max_periodic_rescans: null
    context_settle_ms: 400
    keywords:
      override: [...]
      high: [...]
      medium: [...]
    ollama:
      url: http://localhost:11434
      model: llama3.2:3b
      system_prompt: ...

Every key is optional.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .capability.ollama import DEFAULT_OLLAMA_MODEL, DEFAULT_OLLAMA_URL
from .classify.rules import KEYWORD_TABLES, KeywordTables
from .errors import ConfigError


INT_FIELDS = (
    "batch_size",
    "inter_batch_delay_ms",
    "debounce_ms",
    "rescan_interval_ms",
    "context_settle_ms",
)


@dataclass
class EngineConfig:
    """Recognized engine options."""
    batch_size: int = 5
    inter_batch_delay_ms: int = 100
    classify_timeout_s: Optional[float] = 30.0
    debounce_ms: int = 300
    rescan_interval_ms: int = 3000
    # None = rescan for as long as the monitor runs
    max_periodic_rescans: Optional[int] = None
    context_settle_ms: int = 400
    override_keywords: List[str] = field(default_factory=lambda: list(KEYWORD_TABLES["override"]))
    high_keywords: List[str] = field(default_factory=lambda: list(KEYWORD_TABLES["high"]))
    medium_keywords: List[str] = field(default_factory=lambda: list(KEYWORD_TABLES["medium"]))
    ollama_url: str = DEFAULT_OLLAMA_URL
    ollama_model: str = DEFAULT_OLLAMA_MODEL
    system_prompt: Optional[str] = None

    def keyword_tables(self) -> KeywordTables:
        return KeywordTables(
            override=list(self.override_keywords),
            high=list(self.high_keywords),
            medium=list(self.medium_keywords),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_size": self.batch_size,
            "inter_batch_delay_ms": self.inter_batch_delay_ms,
            "classify_timeout_s": self.classify_timeout_s,
            "debounce_ms": self.debounce_ms,
            "rescan_interval_ms": self.rescan_interval_ms,
            "max_periodic_rescans": self.max_periodic_rescans,
            "context_settle_ms": self.context_settle_ms,
            "keywords": {
                "override": list(self.override_keywords),
                "high": list(self.high_keywords),
                "medium": list(self.medium_keywords),
            },
            "ollama": {
                "url": self.ollama_url,
                "model": self.ollama_model,
                "system_prompt": self.system_prompt,
            },
        }


def _keyword_list(keywords: Dict[str, Any], name: str, default: List[str]) -> List[str]:
    if name not in keywords:
        return list(default)

    value = keywords[name]
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(k, str) for k in value):
        raise ConfigError(f"'keywords.{name}' must be a list of strings")
    return list(value)


def config_from_dict(data: Dict[str, Any]) -> EngineConfig:
    """
    Build an EngineConfig from a parsed mapping.

    Args:
        data: Mapping as read from YAML

    Returns:
        EngineConfig

    Raises:
        ConfigError: If a field has the wrong type or range
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    config = EngineConfig()

    for name in INT_FIELDS:
        if name in data:
            value = data[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"'{name}' must be a non-negative integer")
            setattr(config, name, value)

    if config.batch_size < 1:
        raise ConfigError("'batch_size' must be at least 1")

    if "classify_timeout_s" in data:
        value = data["classify_timeout_s"]
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0):
            raise ConfigError("'classify_timeout_s' must be a positive number or null")
        config.classify_timeout_s = float(value) if value is not None else None

    if "max_periodic_rescans" in data:
        value = data["max_periodic_rescans"]
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 1):
            raise ConfigError("'max_periodic_rescans' must be a positive integer or null")
        config.max_periodic_rescans = value

    keywords = data.get("keywords") or {}
    if not isinstance(keywords, dict):
        raise ConfigError("'keywords' must be a mapping")
    config.override_keywords = _keyword_list(keywords, "override", config.override_keywords)
    config.high_keywords = _keyword_list(keywords, "high", config.high_keywords)
    config.medium_keywords = _keyword_list(keywords, "medium", config.medium_keywords)

    ollama = data.get("ollama") or {}
    if not isinstance(ollama, dict):
        raise ConfigError("'ollama' must be a mapping")
    config.ollama_url = ollama.get("url") or config.ollama_url
    config.ollama_model = ollama.get("model") or config.ollama_model
    config.system_prompt = ollama.get("system_prompt") or None

    return config


def load_config(path: Optional[str] = None) -> EngineConfig:
    """
    Load engine configuration from a YAML file.

    Environment variables OLLAMA_URL and OLLAMA_MODEL override the file.

    Args:
        path: Path to commentguard.yaml, or None for defaults

    Returns:
        EngineConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ConfigError: If a field is invalid
    """
    data: Dict[str, Any] = {}

    if path:
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    config = config_from_dict(data)

    if os.getenv("OLLAMA_URL"):
        config.ollama_url = os.environ["OLLAMA_URL"]
    if os.getenv("OLLAMA_MODEL"):
        config.ollama_model = os.environ["OLLAMA_MODEL"]

    return config


def save_config(path: str, config: EngineConfig) -> None:
    """
    Save engine configuration to a YAML file.

    Args:
        path: Path to save commentguard.yaml
        config: Configuration to write
    """
    config_path = Path(path)

    # Ensure parent directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)
