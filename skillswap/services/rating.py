import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import NoResultFound

from skillswap.exceptions.http import NotFoundError, ValidationError
from skillswap.models.definitions import User
from skillswap.repositories import UserRepository
from skillswap.services.events import SwapCompleted

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def average_rating(rating_sum: int, total_ratings: int) -> float:
    """Mean rating rounded half away from zero to one decimal place."""
    mean = Decimal(rating_sum) / Decimal(total_ratings)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class RatingService:
    """
    Sole writer of a user's rating state. It never opens a transaction of its
    own; it runs inside the unit of work of the swap completion that fed it.
    """

    def __init__(self, user_repo: UserRepository):
        self._user_repo = user_repo

    async def apply_rating(self, user_id: int, rating: int) -> User:
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")

        try:
            rating_sum, total_ratings = await self._user_repo.increment_rating_totals(user_id, rating)
        except NoResultFound as exc:
            raise NotFoundError("Rated user not found.") from exc

        user = await self._user_repo.set_rating(user_id, average_rating(rating_sum, total_ratings))
        logger.info("User %s rated %s, now %.1f over %d ratings", user_id, rating, user.rating, total_ratings)
        return user

    async def handle_swap_completed(self, event: SwapCompleted) -> User:
        return await self.apply_rating(event.rated_user_id, event.rating)
