"""
Application configuration.

Defaults cover a USD/CLP calculator. A YAML file can override any key; the
repository ships data/market_defaults.yaml as the reference layout:

    market:
      base_currency: USD
      quote_currency: CLP
      fallback_rate: 942.51
      fallback_volatility: 0.159
      domestic_rate: 0.055
      foreign_rate: 0.059
    scenarios:
      variation_range: [-0.25, 0.25]
      steps: 20
      max_steps: 1000
    greeks_precision: 4
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Tuple
import yaml
from fxlab.errors import ConfigError

CONFIG_ENV_VAR = "FXLAB_CONFIG"


@dataclass(frozen=True)
class MarketDefaults:
    """
    Market inputs used to seed a calculation and to stand in for a failed fetch.

    Attributes:
        base_currency: Foreign currency of the pair (the one the notional is in)
        quote_currency: Domestic currency of the pair
        fallback_rate: Spot used when market data is unavailable
        fallback_volatility: Annualized volatility used when unavailable
        domestic_rate: Domestic risk-free rate (decimal)
        foreign_rate: Foreign risk-free rate (decimal)
        history_period: yfinance period for the volatility estimate
    """
    base_currency: str = "USD"
    quote_currency: str = "CLP"
    fallback_rate: float = 942.51
    fallback_volatility: float = 0.159
    domestic_rate: float = 0.055
    foreign_rate: float = 0.059
    history_period: str = "1y"


@dataclass(frozen=True)
class ScenarioConfig:
    """Payoff sweep settings."""
    variation_range: Tuple[float, float] = (-0.25, 0.25)
    steps: int = 20
    max_steps: int = 1000


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration."""
    market: MarketDefaults = field(default_factory=MarketDefaults)
    scenarios: ScenarioConfig = field(default_factory=ScenarioConfig)
    greeks_precision: Optional[int] = 4
    cache_dir: str = ".cache"
    cache_ttl_seconds: int = 900


def _overlay(section, values: dict, section_name: str):
    """Return a copy of a config dataclass with the keys found in `values`."""
    if not isinstance(values, dict):
        raise ConfigError(f"'{section_name}' must be a mapping")
    known = {f.name for f in fields(section)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{section_name}': {', '.join(sorted(unknown))}")
    return replace(section, **values)


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load configuration, overlaying a YAML file on the defaults.

    Args:
        path: YAML file path. If None, FXLAB_CONFIG is consulted; with
            neither, the defaults are returned.

    Returns:
        AppConfig

    Raises:
        ConfigError: If the file is missing, unparseable, or has unknown keys
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    config = AppConfig()
    if not path:
        return config

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a mapping")

    raw = dict(raw)
    market = config.market
    scenarios = config.scenarios
    if "market" in raw:
        market = _overlay(market, raw.pop("market"), "market")
    if "scenarios" in raw:
        scenario_values = raw.pop("scenarios") or {}
        if not isinstance(scenario_values, dict):
            raise ConfigError("'scenarios' must be a mapping")
        scenario_values = dict(scenario_values)
        if "variation_range" in scenario_values:
            variation_range = scenario_values["variation_range"]
            if not isinstance(variation_range, (list, tuple)) or len(variation_range) != 2:
                raise ConfigError(
                    f"'scenarios.variation_range' must be a [low, high] pair, got {variation_range!r}"
                )
            scenario_values["variation_range"] = tuple(variation_range)
        scenarios = _overlay(scenarios, scenario_values, "scenarios")

    config = _overlay(config, raw, "config")
    return replace(config, market=market, scenarios=scenarios)
