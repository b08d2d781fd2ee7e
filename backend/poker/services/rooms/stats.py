import math
from typing import Dict, Optional

from poker.models import ESCAPE_VOTE


def _as_number(vote) -> Optional[float]:
    if vote is None or vote == ESCAPE_VOTE:
        return None
    try:
        number = float(vote)
    except (TypeError, ValueError):
        return None
    # "nan" and "inf" parse as floats but are not estimates
    return number if math.isfinite(number) else None


def summarize_votes(votes: Dict[str, Optional[str]]) -> dict:
    """Summarize a revealed round.

    Numeric tokens are averaged (one decimal place); "?" and anything that
    does not parse as a number are left out of the average.
    """
    numeric = [n for n in (_as_number(v) for v in votes.values()) if n is not None]
    average = round(sum(numeric) / len(numeric), 1) if numeric else None
    return {
        'average': average,
        'numeric_count': len(numeric),
        'unsure_count': sum(1 for v in votes.values() if v == ESCAPE_VOTE),
        'total': len(votes),
    }
