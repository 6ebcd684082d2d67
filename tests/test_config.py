"""
Tests for configuration loading.

Tests cover:
- Built-in defaults
- YAML overlays and the shipped defaults file
- Environment variable lookup
- Invalid files and keys
"""

import pytest
import tempfile
from pathlib import Path
from fxlab.config import AppConfig, CONFIG_ENV_VAR, load_config
from fxlab.errors import ConfigError

SHIPPED_DEFAULTS = Path(__file__).parent.parent / "data" / "market_defaults.yaml"


def write_yaml(tmpdir, text):
    path = Path(tmpdir) / "config.yaml"
    path.write_text(text)
    return str(path)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults(self, monkeypatch):
        """Test defaults without a file."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        config = load_config()
        assert config == AppConfig()
        assert config.market.fallback_rate == 942.51
        assert config.market.fallback_volatility == 0.159
        assert config.scenarios.variation_range == (-0.25, 0.25)
        assert config.scenarios.steps == 20
        assert config.scenarios.max_steps == 1000
        assert config.greeks_precision == 4

    def test_shipped_file_matches_defaults(self):
        """Test the reference YAML reproduces the built-in defaults."""
        assert load_config(str(SHIPPED_DEFAULTS)) == AppConfig()

    def test_partial_overlay(self):
        """Test only the given keys change."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_yaml(tmpdir, "market:\n  quote_currency: MXN\n  domestic_rate: 0.1\n")
            config = load_config(path)
            assert config.market.quote_currency == "MXN"
            assert config.market.domestic_rate == 0.1
            assert config.market.base_currency == "USD"
            assert config.scenarios.steps == 20

    def test_scenario_range_becomes_tuple(self):
        """Test YAML lists are converted to tuples."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_yaml(tmpdir, "scenarios:\n  variation_range: [-0.1, 0.1]\n  steps: 9\n")
            config = load_config(path)
            assert config.scenarios.variation_range == (-0.1, 0.1)
            assert config.scenarios.steps == 9

    def test_top_level_keys(self):
        """Test top-level scalar settings."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_yaml(tmpdir, "greeks_precision: 6\ncache_ttl_seconds: 60\n")
            config = load_config(path)
            assert config.greeks_precision == 6
            assert config.cache_ttl_seconds == 60

    def test_empty_file(self):
        """Test an empty file gives the defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            assert load_config(write_yaml(tmpdir, "")) == AppConfig()

    def test_env_var(self, monkeypatch):
        """Test the path is read from the environment."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_yaml(tmpdir, "greeks_precision: 2\n")
            monkeypatch.setenv(CONFIG_ENV_VAR, path)
            assert load_config().greeks_precision == 2

    def test_missing_file_raises(self):
        """Test a missing file."""
        with pytest.raises(ConfigError, match="not found"):
            load_config("/nonexistent/config.yaml")

    def test_unknown_key_raises(self):
        """Test typos are reported."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_yaml(tmpdir, "market:\n  fallback_rat: 900\n")
            with pytest.raises(ConfigError, match="fallback_rat"):
                load_config(path)

    def test_unknown_top_level_key_raises(self):
        """Test unknown top-level keys."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ConfigError):
                load_config(write_yaml(tmpdir, "colour: blue\n"))

    def test_invalid_yaml_raises(self):
        """Test unparseable YAML."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ConfigError, match="parse"):
                load_config(write_yaml(tmpdir, "market: [unclosed\n"))

    def test_non_mapping_raises(self):
        """Test a YAML list at the top level."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ConfigError):
                load_config(write_yaml(tmpdir, "- 1\n- 2\n"))

    @pytest.mark.parametrize("value", ["0.25", "[-0.1, 0.0, 0.1]", "{low: -0.1}"])
    def test_malformed_variation_range_raises(self, value):
        """Test a range that is not a two-element list."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_yaml(tmpdir, f"scenarios:\n  variation_range: {value}\n")
            with pytest.raises(ConfigError, match="variation_range"):
                load_config(path)

    def test_max_steps_overlay(self):
        """Test the sweep bound is configurable."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_yaml(tmpdir, "scenarios:\n  max_steps: 50\n")
            assert load_config(path).scenarios.max_steps == 50

    def test_non_mapping_section_raises(self):
        """Test a section that is not a mapping."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ConfigError):
                load_config(write_yaml(tmpdir, "scenarios: 5\n"))
