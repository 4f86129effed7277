"""Progress calculation for multi-step tasks."""

import math

DEFAULT_PROGRESS_START = 10
DEFAULT_PROGRESS_END = 90


def calculate_progress(
    processed: int,
    total: int,
    start: int = DEFAULT_PROGRESS_START,
    end: int = DEFAULT_PROGRESS_END,
) -> int:
    """Map processed/total onto the [start, end] progress window.

    The window below ``start`` is reserved for setup and the window above
    ``end`` for finalization.

    Args:
        processed: Steps finished so far (successful or not)
        total: Total number of steps
        start: Progress reported before the first step
        end: Progress reported after the last step

    Returns:
        ``start + processed / total * (end - start)`` rounded half up, or
        ``start`` when ``total`` is zero.

    Example:
        >>> calculate_progress(1, 3)
        37
        >>> calculate_progress(2, 3)
        63
    """
    if total <= 0:
        return start
    return math.floor(start + (processed / total) * (end - start) + 0.5)
