"""
Core entity classes (ADTs) for the options lab.

These classes are the value structures passed between the pricing engine,
the scenario generator and the presentation layers. They are immutable and
check their representation invariants on construction.
"""

import math
from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Union
import numpy as np
import pandas as pd
from fxlab.errors import InvalidInputError


class OptionType(str, Enum):
    """European option direction."""
    CALL = "call"
    PUT = "put"

    @classmethod
    def parse(cls, value: Union["OptionType", str, bool]) -> "OptionType":
        """
        Normalize an option type token.

        Accepts an OptionType, a case-insensitive "call"/"put" string, or a
        boolean where True means call.

        Raises:
            InvalidInputError: If the value is not a recognised token
        """
        if isinstance(value, cls):
            return value
        # bool before str: the upstream form passes is_call flags around
        if isinstance(value, bool):
            return cls.CALL if value else cls.PUT
        if isinstance(value, str):
            token = value.strip().lower()
            for member in cls:
                if member.value == token:
                    return member
        raise InvalidInputError(f"option_type must be 'call' or 'put', got {value!r}")

    @property
    def is_call(self) -> bool:
        return self is OptionType.CALL


def _require_positive(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")
    return value


def _require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return value


@dataclass(frozen=True)
class OptionInputs:
    """
    Market inputs for pricing a European currency option.

    Attributes:
        spot: Spot rate (domestic currency per unit of foreign currency)
        strike: Strike rate
        time_to_maturity: Time to expiry in years
        volatility: Annualized volatility (decimal)
        domestic_rate: Annualized domestic risk-free rate (decimal)
        foreign_rate: Annualized foreign risk-free rate (decimal)
        option_type: OptionType (strings and booleans are normalized)

    Representation Invariants:
        - spot, strike, time_to_maturity, volatility are finite and > 0
        - domestic_rate and foreign_rate are finite
        - option_type is an OptionType
    """
    spot: float
    strike: float
    time_to_maturity: float
    volatility: float
    domestic_rate: float
    foreign_rate: float
    option_type: OptionType = OptionType.CALL

    def __post_init__(self):
        """Validate representation invariants and normalize fields."""
        # frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, "spot", _require_positive("spot", self.spot))
        object.__setattr__(self, "strike", _require_positive("strike", self.strike))
        object.__setattr__(
            self, "time_to_maturity",
            _require_positive("time_to_maturity", self.time_to_maturity)
        )
        object.__setattr__(self, "volatility", _require_positive("volatility", self.volatility))
        object.__setattr__(self, "domestic_rate", _require_finite("domestic_rate", self.domestic_rate))
        object.__setattr__(self, "foreign_rate", _require_finite("foreign_rate", self.foreign_rate))
        object.__setattr__(self, "option_type", OptionType.parse(self.option_type))

    def with_option_type(self, option_type: Union[OptionType, str, bool]) -> "OptionInputs":
        """Return a copy of these inputs with a different option type."""
        return replace(self, option_type=OptionType.parse(option_type))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["option_type"] = self.option_type.value
        return data


@dataclass(frozen=True)
class Greeks:
    """
    Analytic sensitivities of the premium.

    Attributes:
        delta: dPremium/dSpot
        gamma: d2Premium/dSpot2
        theta: dPremium/dTime, per calendar day
        vega: dPremium/dVolatility (per 1.00 of volatility)
        rho: dPremium/dDomesticRate (per 1.00 of rate)
    """
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PricingResult:
    """
    Everything a results table needs for one calculation.

    Attributes:
        premium: Price per unit of foreign currency, in domestic currency
        greeks: Greeks computed from the same inputs
        break_even: Future spot at which the net result is zero
        inputs: The OptionInputs priced
        notional: Optional foreign-currency amount covered
    """
    premium: float
    greeks: Greeks
    break_even: float
    inputs: OptionInputs
    notional: Optional[float] = None

    @property
    def total_premium(self) -> Optional[float]:
        """Premium paid for the whole notional, or None without a notional."""
        if self.notional is None:
            return None
        return self.premium * self.notional

    def to_dict(self) -> dict:
        return {
            "premium": self.premium,
            "total_premium": self.total_premium,
            "break_even": self.break_even,
            "greeks": self.greeks.to_dict(),
            "inputs": self.inputs.to_dict(),
            "notional": self.notional,
        }


@dataclass(frozen=True)
class Scenario:
    """
    One point of a payoff sweep.

    Attributes:
        variation: Fractional offset from the current spot (e.g. -0.25)
        future_spot: spot * (1 + variation)
        payoff: Gross intrinsic value times notional
        result: payoff - premium * notional
        result_percent: result as a percentage of the premium paid
    """
    variation: float
    future_spot: float
    payoff: float
    result: float
    result_percent: float


@dataclass(frozen=True)
class HedgeScenario:
    """
    One row of the hedging table: what rate is locked in at a future spot.

    Attributes:
        future_spot: Spot rate at expiry
        effective_rate: Rate obtained per unit after paying the premium
        exercised: Whether the option is exercised at this spot
        final_rate: Rate obtained once the option is taken into account
    """
    future_spot: float
    effective_rate: float
    exercised: bool
    final_rate: float


class ScenarioSet:
    """
    An ordered sequence of Scenario points for charting and tables.

    Attributes:
        scenarios: Tuple of Scenario, ascending by future_spot
        break_even: Break-even spot of the option the sweep describes
        option_type: OptionType of the option

    Representation Invariants:
        - scenarios is non-empty
        - future_spot is strictly increasing across the sequence
    """

    def __init__(
        self,
        scenarios: Sequence[Scenario],
        break_even: Optional[float] = None,
        option_type: OptionType = OptionType.CALL
    ):
        self._scenarios = tuple(scenarios)
        self._break_even = break_even
        self._option_type = OptionType.parse(option_type)
        self._check_invariants()

    def _check_invariants(self):
        """Check representation invariants."""
        if len(self._scenarios) == 0:
            raise InvalidInputError("scenario set cannot be empty")
        spots = [s.future_spot for s in self._scenarios]
        if any(later <= earlier for earlier, later in zip(spots, spots[1:])):
            raise InvalidInputError("future_spot must be strictly increasing")

    @property
    def scenarios(self) -> tuple:
        return self._scenarios

    @property
    def break_even(self) -> Optional[float]:
        return self._break_even

    @property
    def option_type(self) -> OptionType:
        return self._option_type

    @property
    def future_spots(self) -> np.ndarray:
        return np.array([s.future_spot for s in self._scenarios])

    @property
    def payoffs(self) -> np.ndarray:
        return np.array([s.payoff for s in self._scenarios])

    @property
    def results(self) -> np.ndarray:
        return np.array([s.result for s in self._scenarios])

    def to_records(self) -> List[dict]:
        """Return the scenarios as a list of plain dicts."""
        return [asdict(s) for s in self._scenarios]

    def to_frame(self) -> pd.DataFrame:
        """Return the scenarios as a DataFrame, one row per point."""
        return pd.DataFrame(self.to_records())

    def __len__(self) -> int:
        return len(self._scenarios)

    def __iter__(self) -> Iterator[Scenario]:
        return iter(self._scenarios)

    def __getitem__(self, index: int) -> Scenario:
        return self._scenarios[index]

    def __repr__(self) -> str:
        return (
            f"ScenarioSet({len(self)} points, {self._option_type.value}, "
            f"{self._scenarios[0].future_spot:.2f}..{self._scenarios[-1].future_spot:.2f})"
        )
