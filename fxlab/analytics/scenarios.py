"""
Break-even and payoff scenario analysis.

This module turns a priced option into the tables the results panel and
payoff chart consume: the break-even spot, a sweep of net results over a
range of future spots, and the hedging table that shows which exchange
rate a position locks in.
"""

import logging
import math
from typing import List, Optional, Tuple
import numpy as np
from fxlab.entities import HedgeScenario, OptionType, Scenario, ScenarioSet
from fxlab.errors import IncompleteParametersError, InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_VARIATION_RANGE = (-0.25, 0.25)
DEFAULT_STEPS = 20
MAX_STEPS = 1000


def break_even(strike: float, premium: float, option_type) -> float:
    """
    Future spot at which the net result of the option is zero.

    Computed from strike and premium directly, not from a scenario sweep.

    Args:
        strike: Strike rate
        premium: Premium per unit of foreign currency
        option_type: OptionType, "call"/"put", or is-call boolean

    Returns:
        strike + premium for a call, strike - premium for a put
    """
    if OptionType.parse(option_type).is_call:
        return strike + premium
    return strike - premium


def total_premium(premium: float, notional: float) -> float:
    """Premium paid for the whole notional."""
    return premium * notional


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def _check_scenario_parameters(spot, strike, premium, notional) -> Tuple[float, float, float, float]:
    named = (("spot", spot), ("strike", strike), ("premium", premium), ("notional", notional))
    missing = [name for name, value in named if _is_missing(value)]
    if missing:
        raise IncompleteParametersError(
            f"Incomplete parameters for scenario generation: missing {', '.join(missing)}"
        )
    infinite = [name for name, value in named if math.isinf(float(value))]
    if infinite:
        raise InvalidInputError(f"{', '.join(infinite)} must be finite")
    spot, strike, premium, notional = (float(value) for _, value in named)
    if spot <= 0 or strike <= 0 or notional <= 0:
        raise IncompleteParametersError(
            f"spot, strike and notional must be positive "
            f"(spot={spot}, strike={strike}, notional={notional})"
        )
    if premium < 0:
        raise IncompleteParametersError(f"premium cannot be negative, got {premium}")
    return spot, strike, premium, notional


def generate_scenarios(
    spot: float,
    strike: float,
    premium: float,
    break_even_spot: Optional[float],
    notional: float,
    option_type,
    variation_range: Tuple[float, float] = DEFAULT_VARIATION_RANGE,
    steps: int = DEFAULT_STEPS,
    max_steps: int = MAX_STEPS
) -> ScenarioSet:
    """
    Sweep future spots and compute payoff and net result at each.

    Variations are `steps` equally spaced points across `variation_range`,
    both ends included. For each, future_spot = spot * (1 + variation).

    Preconditions:
        - spot, strike, notional > 0 and premium >= 0
        - variation_range[0] < variation_range[1] and variation_range[0] > -1
        - 2 <= steps <= max_steps

    Postconditions:
        - Returns a ScenarioSet with `steps` points
        - future_spot is strictly increasing
        - every value is finite
        - result_percent is 0 when premium is 0

    Args:
        spot: Current spot rate
        strike: Strike rate
        premium: Premium per unit of foreign currency
        break_even_spot: Break-even spot; computed from strike and premium if None
        notional: Foreign-currency amount covered
        option_type: OptionType, "call"/"put", or is-call boolean
        variation_range: (low, high) fractional offsets from spot
        steps: Number of points
        max_steps: Largest accepted number of points

    Returns:
        ScenarioSet

    Raises:
        IncompleteParametersError: If spot, strike, premium or notional is
            missing or not usable
        InvalidInputError: If an input is infinite, the range or step count
            is invalid, or the sweep overflows
    """
    spot, strike, premium, notional = _check_scenario_parameters(spot, strike, premium, notional)
    kind = OptionType.parse(option_type)

    low, high = (float(v) for v in variation_range)
    if not (math.isfinite(low) and math.isfinite(high)):
        raise InvalidInputError(f"variation_range must be finite, got {variation_range}")
    if not low < high:
        raise InvalidInputError(f"variation_range must be increasing, got {variation_range}")
    if low <= -1.0:
        raise InvalidInputError(f"variation_range must stay above -1, got {variation_range}")
    if int(steps) != steps or not 2 <= steps <= max_steps:
        raise InvalidInputError(f"steps must be an integer between 2 and {max_steps}, got {steps}")

    if break_even_spot is None:
        break_even_spot = break_even(strike, premium, kind)

    variations = np.linspace(low, high, int(steps))

    # overflow is reported below as InvalidInputError
    with np.errstate(over="ignore", invalid="ignore"):
        future_spots = spot * (1.0 + variations)
        if kind.is_call:
            payoffs = np.maximum(0.0, future_spots - strike) * notional
        else:
            payoffs = np.maximum(0.0, strike - future_spots) * notional

        premium_paid = premium * notional
        results = payoffs - premium_paid
        if premium_paid != 0:
            result_percents = results / premium_paid * 100.0
        else:
            result_percents = np.zeros_like(results)

    if not all(np.isfinite(a).all() for a in (future_spots, payoffs, results, result_percents)):
        raise InvalidInputError(
            f"scenario values overflow for spot={spot}, strike={strike}, "
            f"premium={premium}, notional={notional}"
        )

    scenarios = [
        Scenario(
            variation=float(v),
            future_spot=float(fs),
            payoff=float(p),
            result=float(r),
            result_percent=float(rp),
        )
        for v, fs, p, r, rp in zip(variations, future_spots, payoffs, results, result_percents)
    ]

    logger.debug("generated %d %s scenarios around spot %.4f", len(scenarios), kind.value, spot)
    return ScenarioSet(scenarios, break_even=break_even_spot, option_type=kind)


def effective_exchange_rate(future_spot: float, premium: float, notional: float) -> float:
    """
    Rate obtained per unit of foreign currency once the premium is paid.

    Args:
        future_spot: Spot rate at expiry
        premium: Premium per unit of foreign currency
        notional: Foreign-currency amount

    Returns:
        (future_spot * notional - premium * notional) / notional

    Raises:
        InvalidInputError: If notional is not positive
    """
    if not notional > 0:
        raise InvalidInputError(f"notional must be positive, got {notional}")
    received = future_spot * notional
    return (received - total_premium(premium, notional)) / notional


def generate_hedge_scenarios(
    spot: float,
    strike: float,
    premium: float,
    notional: float,
    option_type,
    steps: int = 9,
    step_size: float = 0.025
) -> List[HedgeScenario]:
    """
    Hedging table: the exchange rate a position ends up with at each future spot.

    Future spots form a symmetric grid spot * (1 + (i - steps // 2) * step_size).
    A put is exercised below the strike and floors the rate at the strike; a
    call is exercised above the strike and caps the rate at the strike.

    Preconditions:
        - spot, strike, notional > 0 and premium >= 0
        - steps is odd and >= 1; step_size > 0
        - the lowest future spot stays positive

    Args:
        spot: Current spot rate
        strike: Strike rate
        premium: Premium per unit of foreign currency
        notional: Foreign-currency amount
        option_type: OptionType, "call"/"put", or is-call boolean
        steps: Number of rows (odd, centred on spot)
        step_size: Fractional distance between rows

    Returns:
        List of HedgeScenario ordered by increasing future spot

    Raises:
        IncompleteParametersError: If a parameter is missing or not usable
        InvalidInputError: If an input is infinite, the grid is invalid, or
            an effective rate overflows
    """
    spot, strike, premium, notional = _check_scenario_parameters(spot, strike, premium, notional)
    kind = OptionType.parse(option_type)

    if int(steps) != steps or steps < 1 or steps % 2 == 0:
        raise InvalidInputError(f"steps must be an odd integer >= 1, got {steps}")
    if not step_size > 0:
        raise InvalidInputError(f"step_size must be positive, got {step_size}")
    half = int(steps) // 2
    if 1 - half * step_size <= 0:
        raise InvalidInputError("hedge grid reaches a non-positive future spot")

    rows = []
    for i in range(int(steps)):
        future_spot = spot * (1 + (i - half) * step_size)
        effective = effective_exchange_rate(future_spot, premium, notional)
        if not math.isfinite(effective):
            raise InvalidInputError(f"effective rate overflows at future spot {future_spot}")
        if kind.is_call:
            exercised = future_spot > strike
            final_rate = min(effective, strike)
        else:
            exercised = future_spot < strike
            final_rate = max(effective, strike)
        rows.append(HedgeScenario(
            future_spot=future_spot,
            effective_rate=effective,
            exercised=exercised,
            final_rate=final_rate,
        ))
    return rows
