"""
FastAPI web interface for the options calculator.

This module exposes the pricing core as a small JSON API for the
calculator front end: price + Greeks, payoff scenarios, and the market
snapshot used to seed the form. Handlers are plain functions, so FastAPI
runs them in its threadpool.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

from fxlab.analytics.garman_kohlhagen import evaluate
from fxlab.analytics.maturity import days_to_years, time_to_maturity
from fxlab.analytics.scenarios import MAX_STEPS, generate_scenarios, generate_hedge_scenarios
from fxlab.cache import SnapshotCache
from fxlab.config import load_config
from fxlab.data_sources.market import get_market_snapshot
from fxlab.entities import OptionInputs, OptionType
from fxlab.errors import FXLabError

logger = logging.getLogger(__name__)

config = load_config()

app = FastAPI(title="FX Options Lab")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:8000"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def _normalize_option_type(v):
    return OptionType.parse(v).value


class PriceRequest(BaseModel):
    spot: float
    strike: Optional[float] = None
    days: Optional[int] = None
    time_to_maturity: Optional[float] = None
    maturity_date: Optional[date] = None
    volatility: float
    domestic_rate: float
    foreign_rate: float
    option_type: str = "call"
    notional: Optional[float] = None
    precision: Optional[int] = 4

    @field_validator("option_type", mode="before")
    @classmethod
    def validate_option_type(cls, v):
        return _normalize_option_type(v)

    def resolve_time_to_maturity(self) -> float:
        """Year fraction from whichever maturity field was supplied."""
        given = [v is not None for v in (self.days, self.time_to_maturity, self.maturity_date)]
        if sum(given) != 1:
            raise ValueError("Provide exactly one of days, time_to_maturity, maturity_date")
        if self.days is not None:
            return days_to_years(self.days)
        if self.maturity_date is not None:
            return time_to_maturity(self.maturity_date)
        return self.time_to_maturity


class ScenarioRequest(BaseModel):
    spot: Optional[float] = None
    strike: Optional[float] = None
    premium: Optional[float] = None
    break_even: Optional[float] = None
    notional: Optional[float] = None
    option_type: str = "call"
    variation_range: Optional[Tuple[float, float]] = None
    steps: Optional[int] = Field(default=None, ge=2, le=MAX_STEPS)
    include_hedge: bool = False

    @field_validator("option_type", mode="before")
    @classmethod
    def validate_option_type(cls, v):
        return _normalize_option_type(v)


class ScenarioResponse(BaseModel):
    option_type: str
    break_even: float
    scenarios: List[dict]
    hedge: Optional[List[dict]] = None


@app.post("/api/price")
def price_option(request: PriceRequest):
    """Premium, Greeks, break-even (and total premium when a notional is given)."""
    try:
        inputs = OptionInputs(
            spot=request.spot,
            strike=request.strike if request.strike is not None else request.spot,
            time_to_maturity=request.resolve_time_to_maturity(),
            volatility=request.volatility,
            domestic_rate=request.domestic_rate,
            foreign_rate=request.foreign_rate,
            option_type=request.option_type,
        )
        result = evaluate(inputs, notional=request.notional, precision=request.precision)
    except (FXLabError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_dict()


@app.post("/api/scenarios", response_model=ScenarioResponse)
def scenarios(request: ScenarioRequest):
    """Payoff/result table across a range of future spots."""
    variation_range = request.variation_range or config.scenarios.variation_range
    steps = request.steps if request.steps is not None else config.scenarios.steps
    try:
        scenario_set = generate_scenarios(
            request.spot, request.strike, request.premium, request.break_even,
            request.notional, request.option_type,
            variation_range=variation_range, steps=steps,
            max_steps=config.scenarios.max_steps
        )
        hedge = None
        if request.include_hedge:
            hedge = [
                vars(row) for row in generate_hedge_scenarios(
                    request.spot, request.strike, request.premium,
                    request.notional, request.option_type
                )
            ]
    except FXLabError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ScenarioResponse(
        option_type=scenario_set.option_type.value,
        break_even=scenario_set.break_even,
        scenarios=scenario_set.to_records(),
        hedge=hedge,
    )


@app.get("/api/market-data")
def market_data(base: Optional[str] = None, quote: Optional[str] = None):
    """Market snapshot used to seed the calculator form."""
    cache = SnapshotCache(config.cache_dir, ttl_seconds=config.cache_ttl_seconds)
    try:
        snapshot = get_market_snapshot(base=base, quote=quote, config=config, cache=cache)
    except FXLabError as e:
        logger.error("market data request failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))
    return snapshot.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
