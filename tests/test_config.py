"""Tests for finance_tracker.config -- loading, saving, and initialization."""

from pathlib import Path

import pytest

from finance_tracker.config import data_path, initialize, load_config, save_config
from finance_tracker.models import EXPENSE_CATEGORIES, INCOME_CATEGORIES, AppConfig


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    """Tests for loading config.toml into an AppConfig."""

    def test_loads_default_config(self, tmp_path: Path):
        """Default config.toml produced by initialize() is loadable."""
        initialize(tmp_path)
        config = load_config(tmp_path)

        assert isinstance(config, AppConfig)
        assert config == AppConfig()

    def test_display_settings(self, tmp_path: Path):
        initialize(tmp_path)
        config = load_config(tmp_path)

        assert config.currency_symbol == "R$"
        assert config.decimal_separator == ","
        assert config.thousands_separator == "."

    def test_llm_settings(self, tmp_path: Path):
        """LLM settings are loaded correctly."""
        initialize(tmp_path)
        config = load_config(tmp_path)

        assert config.llm_provider == "anthropic"
        assert config.llm_model == "claude-sonnet-4-20250514"
        assert config.llm_api_key_env == "ANTHROPIC_API_KEY"

    def test_custom_config(self, tmp_path: Path):
        """A hand-crafted config.toml loads with the correct values."""
        (tmp_path / "config.toml").write_text(
            """\
[general]
data_file = "books/2026.json"

[display]
currency_symbol = "$"
decimal_separator = "."
thousands_separator = ","

[categories]
income = ["Salary"]
expense = ["Rent", "Food"]

[llm]
provider = "none"
""",
            encoding="utf-8",
        )
        config = load_config(tmp_path)

        assert config.data_file == "books/2026.json"
        assert config.currency_symbol == "$"
        assert config.income_categories == ["Salary"]
        assert config.expense_categories == ["Rent", "Food"]
        assert config.llm_provider == "none"
        # Keys absent from [llm] keep their defaults
        assert config.llm_api_key_env == "ANTHROPIC_API_KEY"

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        (tmp_path / "config.toml").write_text("", encoding="utf-8")
        config = load_config(tmp_path)

        assert config.data_file == "ledger.json"
        assert config.income_categories == INCOME_CATEGORIES
        assert config.expense_categories == EXPENSE_CATEGORIES

    def test_missing_config_raises(self, tmp_path: Path):
        """FileNotFoundError is raised when config.toml does not exist."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)


# ---------------------------------------------------------------------------
# save_config / data_path
# ---------------------------------------------------------------------------


class TestSaveConfig:
    def test_round_trip(self, tmp_path: Path):
        config = AppConfig(data_file="other.json", currency_symbol="EUR", llm_provider="none")
        path = save_config(tmp_path, config)

        assert path == tmp_path / "config.toml"
        assert load_config(tmp_path) == config

    def test_overwrites(self, tmp_path: Path):
        initialize(tmp_path)
        save_config(tmp_path, AppConfig(data_file="second.json"))
        assert load_config(tmp_path).data_file == "second.json"


class TestDataPath:
    def test_relative_to_root(self, tmp_path: Path):
        assert data_path(tmp_path, AppConfig()) == tmp_path / "ledger.json"

    def test_absolute_kept(self, tmp_path: Path):
        target = tmp_path / "elsewhere" / "ledger.json"
        assert data_path(Path("/unused"), AppConfig(data_file=str(target))) == target


# ---------------------------------------------------------------------------
# initialize
# ---------------------------------------------------------------------------


class TestInitialize:
    """Tests for initializing the project directory."""

    def test_creates_config_file(self, tmp_path: Path):
        initialize(tmp_path)
        assert (tmp_path / "config.toml").is_file()

    def test_does_not_create_ledger(self, tmp_path: Path):
        """The ledger document is created on the first write, not by init."""
        initialize(tmp_path)
        assert not (tmp_path / "ledger.json").exists()

    def test_idempotent_does_not_overwrite(self, tmp_path: Path):
        """Running initialize twice does not overwrite an existing config."""
        initialize(tmp_path)

        custom_content = "# Custom config\n"
        (tmp_path / "config.toml").write_text(custom_content, encoding="utf-8")

        initialize(tmp_path)

        assert (tmp_path / "config.toml").read_text(encoding="utf-8") == custom_content

    def test_creates_missing_parent_directories(self, tmp_path: Path):
        """Initialize creates the target directory itself if it doesn't exist."""
        target = tmp_path / "nested" / "deep" / "finances"
        initialize(target)

        assert target.is_dir()
        assert (target / "config.toml").is_file()
