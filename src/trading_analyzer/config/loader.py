from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from trading_analyzer.config.models import AppConfig, CurrencyConfig, default_config
from trading_analyzer.errors import ConfigError

try:  # pragma: no cover - python < 3.11 fallback
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[assignment]


CONFIG_ENV_PREFIX = "ANALYZER_"


def load_config(path: str | Path | None = None, env_prefix: str = CONFIG_ENV_PREFIX) -> AppConfig:
    config = default_config()
    if path:
        payload = _read_file(Path(path))
        config = AppConfig(**_deep_merge(config.model_dump(), payload))
    return _apply_env_overrides(config, env_prefix=env_prefix)


def _read_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if suffix in {".toml", ".tml"}:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    raise ConfigError(f"Unsupported config format: {path.suffix}")


def _deep_merge(base: dict[str, Any], payload: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in payload.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(config: AppConfig, env_prefix: str) -> AppConfig:
    currency = os.getenv(f"{env_prefix}CURRENCY")
    watchlist_path = os.getenv(f"{env_prefix}WATCHLIST_PATH")
    history_days = _get_env_int(f"{env_prefix}HISTORY_DAYS")
    log_level = os.getenv(f"{env_prefix}LOG_LEVEL")

    updates: dict[str, Any] = {}
    if currency:
        # model_copy would skip the default validator
        updates["currency"] = CurrencyConfig.model_validate(
            {**config.currency.model_dump(), "default": currency}
        )
    if watchlist_path:
        updates["storage"] = config.storage.model_copy(
            update={"watchlist_path": Path(watchlist_path)}
        )
    if history_days is not None:
        updates["data"] = config.data.model_copy(update={"history_days": history_days})
    if log_level:
        updates["log_level"] = log_level.upper()
    return config.model_copy(update=updates) if updates else config


def _get_env_int(key: str) -> int | None:
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
