from __future__ import annotations

import math
from dataclasses import dataclass


DEFAULT_DOWN_PAYMENT_PCT = 0.20
DEFAULT_INTEREST_RATE = 11.5  # annual %, average MX mortgage rate
DEFAULT_TERM_YEARS = 20


@dataclass(slots=True)
class MortgageParams:
    property_price: float
    down_payment: float
    interest_rate: float
    term_years: int

    @classmethod
    def with_defaults(cls, property_price: float) -> MortgageParams:
        return cls(
            property_price=property_price,
            down_payment=property_price * DEFAULT_DOWN_PAYMENT_PCT,
            interest_rate=DEFAULT_INTEREST_RATE,
            term_years=DEFAULT_TERM_YEARS,
        )


@dataclass(slots=True)
class MortgageResult:
    monthly_payment: int
    total_payment: int
    total_interest: int
    loan_amount: float


def calculate_mortgage(params: MortgageParams) -> MortgageResult:
    """
    Fixed-rate annuity: M = P * r(1+r)^n / ((1+r)^n - 1).
    """
    principal = params.property_price - params.down_payment
    monthly_rate = params.interest_rate / 100 / 12
    payments = params.term_years * 12

    if principal <= 0 or monthly_rate <= 0 or payments <= 0:
        return MortgageResult(monthly_payment=0, total_payment=0, total_interest=0, loan_amount=0)

    growth = (1 + monthly_rate) ** payments
    monthly_payment = principal * monthly_rate * growth / (growth - 1)
    total_payment = monthly_payment * payments
    total_interest = total_payment - principal

    return MortgageResult(
        monthly_payment=round_half_up(monthly_payment),
        total_payment=round_half_up(total_payment),
        total_interest=round_half_up(total_interest),
        loan_amount=principal,
    )


def down_payment_percent(params: MortgageParams) -> int:
    if params.property_price <= 0:
        return 0
    return round_half_up(params.down_payment / params.property_price * 100)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
