"""AdminCategoryExpertise entity — an admin's track record in one appeal category."""

from dataclasses import dataclass

from appeal_engine.domain.policies.experience_level import (
    MAX_EXPERIENCE_LEVEL,
    MIN_EXPERIENCE_LEVEL,
    promoted_level,
)
from appeal_engine.domain.value_objects.enums import AppealCategory


def validate_experience_level(level: int) -> int:
    if not MIN_EXPERIENCE_LEVEL <= level <= MAX_EXPERIENCE_LEVEL:
        raise ValueError(
            f"Experience level must be between {MIN_EXPERIENCE_LEVEL} "
            f"and {MAX_EXPERIENCE_LEVEL}, got {level}"
        )
    return level


@dataclass
class AdminCategoryExpertise:
    admin_id: int
    category: AppealCategory
    experience_level: int = MIN_EXPERIENCE_LEVEL
    successful_resolutions: int = 0
    total_resolutions: int = 0

    def __post_init__(self) -> None:
        validate_experience_level(self.experience_level)
        if not 0 <= self.successful_resolutions <= self.total_resolutions:
            raise ValueError(
                "successful_resolutions must be within [0, total_resolutions]"
            )

    @property
    def success_ratio(self) -> float:
        return self.successful_resolutions / max(self.total_resolutions, 1)

    def record_resolution(self, successful: bool) -> None:
        """Count one closed appeal and promote the level if the record earns it."""
        self.total_resolutions += 1
        if successful:
            self.successful_resolutions += 1
        self.experience_level = promoted_level(
            self.experience_level,
            self.successful_resolutions,
            self.total_resolutions,
        )

    def set_experience_level(self, level: int) -> None:
        self.experience_level = validate_experience_level(level)
