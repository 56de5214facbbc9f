"""
Tiered compensation amounts.

Money is Decimal throughout. Conversion to the payout currency is applied to
the unrounded amount and the result is rounded half-up to cents once, so a
EUR->GBP->EUR round trip only ever differs by rounding.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from .tiers import get_tier_for_delay
from .types import DEFAULT_EUR_TO_GBP_RATE, MINIMUM_PAYOUT, CompensationResult, Currency

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, str]

CURRENCY_SYMBOLS = {Currency.EUR: "€", Currency.GBP: "£"}


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _rate(exchange_rate: Optional[Number]) -> Decimal:
    rate = DEFAULT_EUR_TO_GBP_RATE if exchange_rate is None else Decimal(str(exchange_rate))
    if rate <= 0:
        raise ValueError(f"exchange rate must be positive, got {rate}")
    return rate


def convert_eur_to_gbp(amount: Number, exchange_rate: Optional[Number] = None) -> Decimal:
    return round_money(Decimal(str(amount)) * _rate(exchange_rate))


def convert_gbp_to_eur(amount: Number, exchange_rate: Optional[Number] = None) -> Decimal:
    return round_money(Decimal(str(amount)) / _rate(exchange_rate))


def _convert_unrounded(amount: Decimal, source: Currency, target: Currency, rate: Decimal) -> Decimal:
    if source is target:
        return amount
    if source is Currency.EUR and target is Currency.GBP:
        return amount * rate
    return amount / rate


def calculate_compensation(
    delay_minutes: int,
    ticket_price: Number,
    currency: Currency = Currency.EUR,
    ticket_currency: Currency = Currency.EUR,
    exchange_rate: Optional[Number] = None,
) -> CompensationResult:
    price = Decimal(str(ticket_price))
    tier = get_tier_for_delay(delay_minutes)

    if tier is None:
        return CompensationResult(
            eligible=False,
            cash_amount=ZERO,
            voucher_amount=ZERO,
            tier=None,
            currency=currency,
            ticket_price=price,
            delay_minutes=delay_minutes,
        )

    rate = _rate(exchange_rate)
    cash = round_money(_convert_unrounded(price * tier.cash_percentage, ticket_currency, currency, rate))
    voucher = round_money(_convert_unrounded(price * tier.voucher_percentage, ticket_currency, currency, rate))

    return CompensationResult(
        eligible=cash >= MINIMUM_PAYOUT[currency],
        cash_amount=cash,
        voucher_amount=voucher,
        tier=tier,
        currency=currency,
        ticket_price=price,
        delay_minutes=delay_minutes,
    )


def meets_minimum_payout(result: CompensationResult) -> bool:
    # cash only; vouchers have no minimum of their own
    return result.cash_amount >= MINIMUM_PAYOUT[result.currency]


def format_compensation_amount(amount: Number, currency: Currency) -> str:
    """Decimal('25') + EUR -> '€25.00'"""
    return f"{CURRENCY_SYMBOLS[currency]}{round_money(Decimal(str(amount))):.2f}"
