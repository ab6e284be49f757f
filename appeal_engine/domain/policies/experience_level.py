"""ExperienceLevelPolicy — automatic promotion from resolution history."""

MIN_EXPERIENCE_LEVEL = 1
MAX_EXPERIENCE_LEVEL = 5

# (level, min total resolutions, min success ratio), best level first
PROMOTION_THRESHOLDS: tuple[tuple[int, int, float], ...] = (
    (5, 20, 0.9),
    (4, 15, 0.8),
    (3, 10, 0.7),
    (2, 5, 0.6),
)

# Below this many resolutions the record is too thin to promote anyone
MIN_RESOLUTIONS_FOR_PROMOTION = 5


def earned_level(successful: int, total: int) -> int:
    """Level justified by the record alone."""
    if total < MIN_RESOLUTIONS_FOR_PROMOTION:
        return MIN_EXPERIENCE_LEVEL
    ratio = successful / total
    for level, min_total, min_ratio in PROMOTION_THRESHOLDS:
        if total >= min_total and ratio >= min_ratio:
            return level
    return MIN_EXPERIENCE_LEVEL


def promoted_level(current: int, successful: int, total: int) -> int:
    """Pure function: new experience level after a resolution.

    Business rules:
      1. Fewer than 5 resolutions → level unchanged.
      2. Otherwise the level earned by the record is computed from the
         thresholds table.
      3. Promotion only: a manually granted higher level is never lowered.
    """
    if total < MIN_RESOLUTIONS_FOR_PROMOTION:
        return current
    return max(current, earned_level(successful, total))
