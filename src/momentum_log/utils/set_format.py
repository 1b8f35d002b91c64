"""Human-readable set formatting."""

from ..models.set import Set, SetKind

KM_PER_MILE = 1.60934


def _format_number(value: float) -> str:
    return f"{value:g}"


def format_set_display(set_: Set) -> str:
    """Format a set for display.

    Strength sets render as ``"100 kg × 5"``; cardio and timed sets render as
    ``"MM:SS · X.X km · Y%"`` where distance and incline are optional.
    """
    if set_.effective_kind in (SetKind.CARDIO, SetKind.TIMED):
        seconds = int(set_.duration_sec or 0)
        parts = [f"{seconds // 60}:{seconds % 60:02d}"]
        if set_.distance is not None:
            km = set_.distance * KM_PER_MILE if set_.distance_unit == "mi" else set_.distance
            parts.append(f"{km:.1f} km")
        if set_.incline is not None:
            parts.append(f"{_format_number(set_.incline)}%")
        return " · ".join(parts)

    weight = f"{_format_number(set_.weight)} kg" if set_.weight is not None else "—"
    reps = str(set_.reps) if set_.reps is not None else "—"
    text = f"{weight} × {reps}"
    if set_.rpe is not None:
        text += f" @ RPE {_format_number(set_.rpe)}"
    if set_.is_warmup:
        text += " (warm-up)"
    return text
