from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django import template

register = template.Library()


@register.filter
def money(value):
    """
    Formats a Decimal/number with thousands separator and 2 decimals.
    Example: 12345.6 -> 12,345.60
    """
    try:
        num = Decimal(str(value))
    except (TypeError, ValueError, InvalidOperation):
        return value
    if not num.is_finite():
        return value
    return f"{num.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,.2f}"
