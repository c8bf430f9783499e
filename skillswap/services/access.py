from skillswap.core.principal import Principal
from skillswap.exceptions.http import ForbiddenError


def require_active(actor: Principal) -> None:
    if actor.is_banned:
        raise ForbiddenError("Account has been banned.")


def require_admin(actor: Principal) -> None:
    require_active(actor)
    if not actor.is_admin:
        raise ForbiddenError("Admin access required.")
