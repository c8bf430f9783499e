from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller as supplied by the identity layer.
    Services trust these flags and only enforce authorization on top of them.
    """

    id: int
    is_admin: bool = False
    is_banned: bool = False
