from decimal import Decimal, ROUND_HALF_UP
from typing import Union


class FormattingUtils:
    """
    Money formatting for cart totals

    Cart prices are snapshotted in major units (dollars) as the catalog
    reports them; totals are carried in cents and formatted for display.
    """

    CURRENCY_SYMBOL = '$'
    CURRENCY_CODE = 'USD'

    @classmethod
    def to_cents(cls, amount: Union[Decimal, float, int]) -> int:
        """
        Convert a major-unit amount to whole cents, rounding half up

        Examples:
            to_cents(12.99) -> 1299
            to_cents(Decimal("0.005")) -> 1
        """
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        return int((value * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    @classmethod
    def format_money(cls, amount_cents: int, include_currency_code: bool = False) -> str:
        """
        Format a USD amount in cents for display

        Examples:
            format_money(1299) -> "$12.99"
            format_money(123450) -> "$1,234.50"
            format_money(1299, include_currency_code=True) -> "$12.99 USD"
        """
        amount = Decimal(amount_cents) / 100
        result = f"{cls.CURRENCY_SYMBOL}{amount:,.2f}"

        if include_currency_code:
            result = f"{result} {cls.CURRENCY_CODE}"

        return result
