from __future__ import annotations


class RecommendationError(Exception):
    """Base class for errors raised by the recommendation core."""


class NotFound(RecommendationError):
    """A single-entity lookup found no record with the given id."""

    def __init__(self, recommendation_id: str) -> None:
        super().__init__(f"Recommendation {recommendation_id!r} not found")
        self.recommendation_id = recommendation_id


class Unavailable(RecommendationError):
    """The backing store could not be reached. Never retried internally."""


class InvalidArgument(RecommendationError):
    """A caller supplied a malformed enum value or an out-of-range number."""
