"""
Garman-Kohlhagen pricing of European currency options.

This module implements the closed-form premium and analytic Greeks for
options on a foreign currency. The model is Black-Scholes with two rates:
the foreign rate plays the role of a continuous dividend yield.

    d1 = (ln(S/K) + (rd - rf + sigma^2 / 2) T) / (sigma sqrt(T))
    d2 = d1 - sigma sqrt(T)
    call = S e^(-rf T) N(d1) - K e^(-rd T) N(d2)
    put  = K e^(-rd T) N(-d2) - S e^(-rf T) N(-d1)

Price and Greeks share one DTerms computation per request.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional
from fxlab.analytics.normal import norm_cdf, norm_pdf
from fxlab.analytics.scenarios import break_even
from fxlab.entities import Greeks, OptionInputs, PricingResult
from fxlab.errors import InvalidInputError

logger = logging.getLogger(__name__)

DAYS_PER_YEAR_THETA = 365.0


@dataclass(frozen=True)
class DTerms:
    """
    Intermediate quantities shared by the premium and every Greek.

    Attributes:
        d1: First standardized moneyness term
        d2: d1 - sigma * sqrt(T)
        sqrt_t: sqrt(T)
        sigma_sqrt_t: sigma * sqrt(T)
        domestic_discount: e^(-rd T)
        foreign_discount: e^(-rf T)
    """
    d1: float
    d2: float
    sqrt_t: float
    sigma_sqrt_t: float
    domestic_discount: float
    foreign_discount: float


def d_terms(inputs: OptionInputs) -> DTerms:
    """
    Compute d1, d2 and the discount factors for a set of inputs.

    Preconditions:
        - inputs is a validated OptionInputs

    Postconditions:
        - sigma_sqrt_t > 0 and d1, d2 are not NaN

    Raises:
        InvalidInputError: If sigma * sqrt(T) underflows to zero
    """
    T = inputs.time_to_maturity
    sigma = inputs.volatility
    sqrt_t = math.sqrt(T)
    sigma_sqrt_t = sigma * sqrt_t

    if sigma_sqrt_t <= 0.0:
        raise InvalidInputError(
            f"volatility * sqrt(time_to_maturity) underflows to zero "
            f"(volatility={sigma}, time_to_maturity={T})"
        )

    d1 = (
        math.log(inputs.spot / inputs.strike)
        + (inputs.domestic_rate - inputs.foreign_rate + 0.5 * sigma * sigma) * T
    ) / sigma_sqrt_t
    if math.isnan(d1):
        raise InvalidInputError(f"d1 is undefined for inputs {inputs}")
    d2 = d1 - sigma_sqrt_t

    return DTerms(
        d1=d1,
        d2=d2,
        sqrt_t=sqrt_t,
        sigma_sqrt_t=sigma_sqrt_t,
        domestic_discount=math.exp(-inputs.domestic_rate * T),
        foreign_discount=math.exp(-inputs.foreign_rate * T),
    )


def _premium(inputs: OptionInputs, terms: DTerms) -> float:
    S, K = inputs.spot, inputs.strike
    if inputs.option_type.is_call:
        return (
            S * terms.foreign_discount * norm_cdf(terms.d1)
            - K * terms.domestic_discount * norm_cdf(terms.d2)
        )
    return (
        K * terms.domestic_discount * norm_cdf(-terms.d2)
        - S * terms.foreign_discount * norm_cdf(-terms.d1)
    )


def price(inputs: OptionInputs) -> float:
    """
    Garman-Kohlhagen premium of a European currency option.

    Preconditions:
        - inputs is a validated OptionInputs (spot, strike, T, sigma > 0)

    Postconditions:
        - Returns the premium per unit of foreign currency, in domestic
          currency; non-negative up to rounding

    Args:
        inputs: Option inputs

    Returns:
        Premium

    Raises:
        InvalidInputError: If the inputs are numerically degenerate
    """
    terms = d_terms(inputs)
    premium = _premium(inputs, terms)
    logger.debug("priced %s: d1=%.6f d2=%.6f premium=%.6f",
                 inputs.option_type.value, terms.d1, terms.d2, premium)
    return float(premium)


def price_option(
    spot: float,
    strike: float,
    time_to_maturity: float,
    volatility: float,
    domestic_rate: float,
    foreign_rate: float,
    option_type="call"
) -> float:
    """
    Price from loose keyword arguments (convenience wrapper over price()).

    option_type may be an OptionType, "call"/"put" in any case, or a
    boolean is-call flag.

    Raises:
        InvalidInputError: If any input is invalid
    """
    inputs = OptionInputs(
        spot=spot,
        strike=strike,
        time_to_maturity=time_to_maturity,
        volatility=volatility,
        domestic_rate=domestic_rate,
        foreign_rate=foreign_rate,
        option_type=option_type,
    )
    return price(inputs)


def _round(value: float, precision: Optional[int]) -> float:
    if precision is None:
        return float(value)
    return round(float(value), precision)


def greeks(inputs: OptionInputs, precision: Optional[int] = 4) -> Greeks:
    """
    Analytic Greeks of a European currency option.

    Theta is reported per calendar day (annual theta / 365). Rho is the
    sensitivity to the domestic rate only.

    Preconditions:
        - inputs is a validated OptionInputs
        - precision is None or a non-negative integer

    Postconditions:
        - call delta in [0, e^(-rf T)], put delta in [-e^(-rf T), 0]
        - gamma and vega are identical for a call and a put
        - each value is rounded to `precision` decimals unless precision is None

    Args:
        inputs: Option inputs
        precision: Decimals to round to, or None for full precision

    Returns:
        Greeks

    Raises:
        InvalidInputError: If precision is negative or inputs are degenerate
    """
    if precision is not None and precision < 0:
        raise InvalidInputError(f"precision must be non-negative, got {precision}")

    terms = d_terms(inputs)
    S, K = inputs.spot, inputs.strike
    T = inputs.time_to_maturity
    sigma = inputs.volatility
    rd, rf = inputs.domestic_rate, inputs.foreign_rate
    df_d, df_f = terms.domestic_discount, terms.foreign_discount
    pdf_d1 = norm_pdf(terms.d1)

    gamma = df_f * pdf_d1 / (S * terms.sigma_sqrt_t)
    vega = S * df_f * pdf_d1 * terms.sqrt_t
    decay = -S * df_f * pdf_d1 * sigma / (2.0 * terms.sqrt_t)

    if inputs.option_type.is_call:
        delta = df_f * norm_cdf(terms.d1)
        theta_annual = (
            decay
            - rd * K * df_d * norm_cdf(terms.d2)
            + rf * S * df_f * norm_cdf(terms.d1)
        )
        rho = K * T * df_d * norm_cdf(terms.d2)
    else:
        delta = df_f * (norm_cdf(terms.d1) - 1.0)
        theta_annual = (
            decay
            + rd * K * df_d * norm_cdf(-terms.d2)
            - rf * S * df_f * norm_cdf(-terms.d1)
        )
        rho = -K * T * df_d * norm_cdf(-terms.d2)

    return Greeks(
        delta=_round(delta, precision),
        gamma=_round(gamma, precision),
        theta=_round(theta_annual / DAYS_PER_YEAR_THETA, precision),
        vega=_round(vega, precision),
        rho=_round(rho, precision),
    )


def put_call_parity_gap(inputs: OptionInputs) -> float:
    """
    Deviation from put-call parity for these inputs.

    Returns call - put - (S e^(-rf T) - K e^(-rd T)); zero up to rounding.
    """
    terms = d_terms(inputs)
    call = _premium(inputs.with_option_type("call"), terms)
    put = _premium(inputs.with_option_type("put"), terms)
    forward_value = (
        inputs.spot * terms.foreign_discount
        - inputs.strike * terms.domestic_discount
    )
    return float(call - put - forward_value)


def evaluate(
    inputs: OptionInputs,
    notional: Optional[float] = None,
    precision: Optional[int] = 4
) -> PricingResult:
    """
    Premium, Greeks and break-even for one calculation request.

    Args:
        inputs: Option inputs
        notional: Optional foreign-currency amount covered
        precision: Rounding for the Greeks (None for full precision)

    Returns:
        PricingResult

    Raises:
        InvalidInputError: If inputs, notional or precision are invalid
    """
    if notional is not None and not (math.isfinite(notional) and notional > 0):
        raise InvalidInputError(f"notional must be positive, got {notional}")

    premium = price(inputs)
    return PricingResult(
        premium=premium,
        greeks=greeks(inputs, precision=precision),
        break_even=break_even(inputs.strike, premium, inputs.option_type),
        inputs=inputs,
        notional=notional,
    )
