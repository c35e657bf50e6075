from decimal import Decimal

from django.conf import settings

from common.utils import to_money

TAX_RATE = Decimal(str(getattr(settings, "ORDER_TAX_RATE", "0.10")))
FREE_SHIPPING_THRESHOLD = Decimal(str(getattr(settings, "ORDER_FREE_SHIPPING_THRESHOLD", "500.00")))
SHIPPING_FEE = Decimal(str(getattr(settings, "ORDER_SHIPPING_FEE", "50.00")))


def price_breakdown(subtotal) -> dict:
    """
    Tax is a flat rate on the subtotal; shipping is free strictly above the
    threshold. Every component is rounded half-up to cents.
    """
    subtotal = to_money(subtotal)
    tax = to_money(subtotal * TAX_RATE)
    shipping_fee = to_money(0) if subtotal > FREE_SHIPPING_THRESHOLD else to_money(SHIPPING_FEE)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "shipping_fee": shipping_fee,
        "total": subtotal + tax + shipping_fee,
    }
