import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.core.principal import Principal
from skillswap.exceptions.http import ConflictError, ForbiddenError, NotFoundError
from skillswap.models.definitions import User
from skillswap.repositories import UserRepository
from skillswap.schemas import ProfileRequest, UserRequest, UserResponse
from skillswap.services.access import require_active

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession, user_repo: UserRepository):
        self._session = session
        self._user_repo = user_repo

    # --- 1. USER REGISTRATION ---

    async def register_user(self, data: UserRequest) -> UserResponse:
        """
        Registers a new user. Emails are unique case-insensitively; the unique
        index backs up the lookup against concurrent sign-ups.
        """
        try:
            async with self._session.begin():
                if await self._user_repo.get_by_email(data.email):
                    raise ConflictError("User with this email already exists.")

                created_user: User = await self._user_repo.create(data.model_dump(mode="json"))
                response = UserResponse.model_validate(created_user)
        except IntegrityError as exc:
            raise ConflictError("User with this email already exists.") from exc

        logger.info("Registered user %s", response.id)
        return response

    # --- 2. LOOKUP ---

    async def get_user(self, user_id: int) -> UserResponse:
        async with self._session.begin():
            user = await self._user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found.")
            return UserResponse.model_validate(user)

    # --- 3. PROFILE MANAGEMENT ---

    async def update_profile(self, user_id: int, actor: Principal, data: ProfileRequest) -> UserResponse:
        """
        Updates the caller's own profile fields. Flags, email and rating state
        are not reachable from here.
        """
        require_active(actor)
        if actor.id != user_id:
            raise ForbiddenError("You can only edit your own profile.")

        update_data = data.model_dump(mode="json", exclude_none=True)

        async with self._session.begin():
            if not update_data:
                user_orm = await self._user_repo.get_by_id(user_id)  # Return current if nothing to update
            else:
                user_orm = await self._user_repo.update(user_id, update_data)

            if not user_orm:
                raise NotFoundError("User not found.")
            return UserResponse.model_validate(user_orm)
