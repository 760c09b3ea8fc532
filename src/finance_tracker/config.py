"""Configuration loading, writing, and project initialization.

Reads TOML config files using stdlib ``tomllib`` and writes them using
``tomli_w``.  Depends only on ``models.py``.
"""

from __future__ import annotations

import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from finance_tracker.models import EXPENSE_CATEGORIES, INCOME_CATEGORIES, AppConfig

CONFIG_FILE = "config.toml"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(root: Path) -> AppConfig:
    """Load ``config.toml`` from *root* and return an :class:`AppConfig`.

    Missing sections and keys fall back to the :class:`AppConfig` defaults.

    Args:
        root: Project root directory containing ``config.toml``.

    Raises:
        FileNotFoundError: If ``config.toml`` does not exist.
    """
    data = _read_toml(root / CONFIG_FILE)
    defaults = AppConfig()

    general = data.get("general", {})
    display = data.get("display", {})
    categories = data.get("categories", {})
    llm = data.get("llm", {})

    return AppConfig(
        data_file=general.get("data_file", defaults.data_file),
        currency_symbol=display.get("currency_symbol", defaults.currency_symbol),
        decimal_separator=display.get("decimal_separator", defaults.decimal_separator),
        thousands_separator=display.get("thousands_separator", defaults.thousands_separator),
        income_categories=list(categories.get("income", INCOME_CATEGORIES)),
        expense_categories=list(categories.get("expense", EXPENSE_CATEGORIES)),
        llm_provider=llm.get("provider", defaults.llm_provider),
        llm_model=llm.get("model", defaults.llm_model),
        llm_api_key_env=llm.get("api_key_env", defaults.llm_api_key_env),
    )


def save_config(root: Path, config: AppConfig) -> Path:
    """Write *config* to ``config.toml`` under *root*, overwriting it.

    Returns:
        Path to the written file.
    """
    path = root / CONFIG_FILE
    path.write_text(tomli_w.dumps(_config_to_toml(config)), encoding="utf-8")
    return path


def initialize(target_dir: Path) -> None:
    """Create *target_dir* with a default ``config.toml``.

    Idempotent: an existing ``config.toml`` is **not** overwritten.
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    if not (target_dir / CONFIG_FILE).exists():
        save_config(target_dir, AppConfig())


def data_path(root: Path, config: AppConfig) -> Path:
    """Resolve the ledger document path (relative paths are under *root*)."""
    path = Path(config.data_file).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_toml(path: Path) -> dict:
    """Read and parse a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _config_to_toml(config: AppConfig) -> dict:
    return {
        "general": {"data_file": config.data_file},
        "display": {
            "currency_symbol": config.currency_symbol,
            "decimal_separator": config.decimal_separator,
            "thousands_separator": config.thousands_separator,
        },
        "categories": {
            "income": list(config.income_categories),
            "expense": list(config.expense_categories),
        },
        "llm": {
            "provider": config.llm_provider,
            "model": config.llm_model,
            "api_key_env": config.llm_api_key_env,
        },
    }
