"""
In-memory store for user-submitted reviews.

Process-lifetime only; nothing is persisted and there is no concurrency
control beyond the single-threaded event loop.
"""

import time
from typing import Callable, Union

from implementation.classes.schemas import StoredReview


class ReviewStore:
    """
    Append-only list of reviews, queried by movie id.

    Review ids are millisecond timestamps from `clock`, bumped when needed so
    they stay strictly increasing.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._reviews: list[StoredReview] = []
        self._last_id = 0

    def _next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    def add(self, movie_id: Union[int, str], text: str, rating: float = 0) -> StoredReview:
        review = StoredReview(id=self._next_id(), movie_id=movie_id, text=text, rating=rating)
        self._reviews.append(review)
        return review

    def list_for_movie(self, movie_id: Union[int, str]) -> list[StoredReview]:
        """Reviews for a movie, oldest first. Ids match on their string form (5 == "5")."""
        key = str(movie_id)
        return [review for review in self._reviews if str(review.movie_id) == key]

    def __len__(self) -> int:
        return len(self._reviews)
