"""Human-readable formatting for distances, times and result positions."""


def format_distance(distance_km: float) -> str:
    """Metres below 1 km, otherwise km with one decimal."""
    metres = round(distance_km * 1000)
    if metres < 1000:
        return f"{metres}m"
    return f"{distance_km:.1f}km"


def format_duration(minutes: float) -> str:
    total = round(minutes)
    if total < 60:
        return f"{total} min"
    hours, mins = divmod(total, 60)
    return f"{hours}h {mins}m" if mins else f"{hours}h"


def ordinal(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 23 -> '23rd'."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def rank_label(index: int) -> str:
    """Badge text for the venue at ``index`` in the ranked list."""
    if index == 0:
        return "NEAREST PUB"
    return f"{ordinal(index + 1).upper()} CLOSEST PUB"
