from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce ``value`` to a Decimal rounded half-up to cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def growth_percent(current, previous) -> float:
    """Percentage change from ``previous`` to ``current``, rounded to 2 places."""
    current = Decimal(str(current or 0))
    previous = Decimal(str(previous or 0))
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float(((current - previous) / previous * 100).quantize(CENT, rounding=ROUND_HALF_UP))


def client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def user_agent(request):
    return request.META.get("HTTP_USER_AGENT", "unknown")
