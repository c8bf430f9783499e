from dataclasses import dataclass


@dataclass(frozen=True)
class SwapCompleted:
    """Emitted inside the completing transaction; the rating is for `rated_user_id`."""

    request_id: int
    rated_user_id: int
    rating: int
