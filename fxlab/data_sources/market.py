"""
Market data for seeding option inputs.

This module downloads the exchange rate history of a currency pair from
yfinance and derives the spot and an annualized historical volatility.
Interest rates come from configuration. When the download fails, an
explicit fallback snapshot built from configuration is returned instead.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional
import numpy as np
import pandas as pd
import yfinance as yf
from fxlab.analytics.maturity import days_to_years
from fxlab.cache import SnapshotCache
from fxlab.config import AppConfig, MarketDefaults
from fxlab.entities import OptionInputs, OptionType
from fxlab.errors import CacheError, DataError

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252
TIMESTAMP_FORMAT = "%d-%m-%Y %H:%M:%S"


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Market inputs for one currency pair at one point in time.

    Attributes:
        pair: Yahoo Finance symbol (e.g. "USDCLP=X")
        current_rate: Spot, domestic currency per unit of foreign currency
        volatility: Annualized volatility (decimal)
        domestic_rate: Domestic risk-free rate (decimal)
        foreign_rate: Foreign risk-free rate (decimal)
        last_updated: Time of the snapshot (DD-MM-YYYY HH:MM:SS)
        source: Where the numbers came from
        is_fallback: True when configuration defaults stand in for market data
    """
    pair: str
    current_rate: float
    volatility: float
    domestic_rate: float
    foreign_rate: float
    last_updated: str
    source: str
    is_fallback: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def pair_symbol(base: str, quote: str) -> str:
    """Yahoo Finance symbol quoting `quote` currency per unit of `base`."""
    return f"{base.upper()}{quote.upper()}=X"


def historical_volatility(
    closes: pd.Series,
    trading_days: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Annualized volatility of daily log returns.

    Preconditions:
        - closes holds at least 3 positive prices

    Args:
        closes: Close prices, oldest first
        trading_days: Observations per year for annualization

    Returns:
        Sample standard deviation of log returns times sqrt(trading_days)

    Raises:
        DataError: If there are too few usable prices
    """
    closes = pd.Series(closes).dropna()
    closes = closes[closes > 0]
    if len(closes) < 3:
        raise DataError(f"Need at least 3 prices for volatility, got {len(closes)}")

    log_returns = np.log(closes / closes.shift(1)).dropna()
    return float(log_returns.std(ddof=1) * np.sqrt(trading_days))


def fallback_snapshot(defaults: Optional[MarketDefaults] = None, reason: str = "") -> MarketSnapshot:
    """
    Snapshot built from configured defaults.

    Args:
        defaults: MarketDefaults (default: built-in defaults)
        reason: Short description of why the fallback is used

    Returns:
        MarketSnapshot with is_fallback=True
    """
    defaults = defaults or MarketDefaults()
    source = "Configured defaults"
    if reason:
        source = f"{source} ({reason})"
    return MarketSnapshot(
        pair=pair_symbol(defaults.base_currency, defaults.quote_currency),
        current_rate=defaults.fallback_rate,
        volatility=defaults.fallback_volatility,
        domestic_rate=defaults.domestic_rate,
        foreign_rate=defaults.foreign_rate,
        last_updated=datetime.now().strftime(TIMESTAMP_FORMAT),
        source=source,
        is_fallback=True,
    )


def _download_snapshot(defaults: MarketDefaults, symbol: str) -> MarketSnapshot:
    try:
        history = yf.Ticker(symbol).history(period=defaults.history_period)
    except Exception as e:
        raise DataError(f"Failed to download {symbol}: {e}") from e

    if history is None or history.empty or "Close" not in history.columns:
        raise DataError(f"No data returned for {symbol}")

    closes = history["Close"].dropna()
    if closes.empty:
        raise DataError(f"No close prices for {symbol}")

    spot = float(closes.iloc[-1])
    volatility = historical_volatility(closes)
    if not spot > 0:
        raise DataError(f"Non-positive spot for {symbol}: {spot}")
    if not volatility > 0:
        raise DataError(f"Volatility for {symbol} is not positive: {volatility}")

    return MarketSnapshot(
        pair=symbol,
        current_rate=round(spot, 2),
        volatility=round(volatility, 4),
        domestic_rate=defaults.domestic_rate,
        foreign_rate=defaults.foreign_rate,
        last_updated=datetime.now().strftime(TIMESTAMP_FORMAT),
        source="Yahoo Finance",
    )


def get_market_snapshot(
    base: Optional[str] = None,
    quote: Optional[str] = None,
    config: Optional[AppConfig] = None,
    cache: Optional[SnapshotCache] = None,
    use_cache: bool = True,
    allow_fallback: bool = True
) -> MarketSnapshot:
    """
    Current spot, volatility and rates for a currency pair.

    Postconditions:
        - current_rate > 0 and volatility > 0
        - is_fallback is True only if the download failed and
          allow_fallback is set

    Args:
        base: Foreign currency (default from config, USD)
        quote: Domestic currency (default from config, CLP)
        config: AppConfig supplying rates and fallback values
        cache: Optional SnapshotCache
        use_cache: Whether to read from the cache
        allow_fallback: Return configured defaults instead of raising

    Returns:
        MarketSnapshot

    Raises:
        DataError: If the download fails and allow_fallback is False
    """
    defaults = (config or AppConfig()).market
    symbol = pair_symbol(base or defaults.base_currency, quote or defaults.quote_currency)
    query_params = {"symbol": symbol, "period": defaults.history_period}

    if use_cache and cache is not None:
        try:
            cached = cache.get(query_params)
        except CacheError as e:
            logger.warning("Ignoring unreadable market cache entry: %s", e)
            cached = None
        if cached is not None:
            logger.debug("market snapshot for %s served from cache", symbol)
            return cached

    try:
        snapshot = _download_snapshot(defaults, symbol)
    except DataError as e:
        if not allow_fallback:
            raise
        logger.warning("Market data unavailable for %s, using configured defaults: %s", symbol, e)
        return fallback_snapshot(defaults, reason="market data unavailable")

    if cache is not None:
        try:
            cache.set(query_params, snapshot)
        except CacheError as e:
            logger.warning("Could not cache market snapshot for %s: %s", symbol, e)

    logger.info("%s spot=%.2f vol=%.4f", symbol, snapshot.current_rate, snapshot.volatility)
    return snapshot


def seed_inputs(
    snapshot: MarketSnapshot,
    days: int,
    option_type=OptionType.CALL,
    strike: Optional[float] = None
) -> OptionInputs:
    """
    Build OptionInputs from a market snapshot.

    Args:
        snapshot: MarketSnapshot
        days: Days to maturity (fixed 365-day year)
        option_type: OptionType, "call"/"put", or is-call boolean
        strike: Strike rate (default: at the money)

    Returns:
        OptionInputs
    """
    return OptionInputs(
        spot=snapshot.current_rate,
        strike=snapshot.current_rate if strike is None else strike,
        time_to_maturity=days_to_years(days),
        volatility=snapshot.volatility,
        domestic_rate=snapshot.domestic_rate,
        foreign_rate=snapshot.foreign_rate,
        option_type=option_type,
    )
