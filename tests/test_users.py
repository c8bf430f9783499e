"""Tests for registration and profile edits."""

import pytest
from pydantic import ValidationError as SchemaValidationError

from skillswap.core.principal import Principal
from skillswap.exceptions import ConflictError, ForbiddenError, NotFoundError
from skillswap.models.definitions import DEFAULT_RATING
from skillswap.schemas import ProfileRequest, UserRequest


class TestRegistration:
    async def test_defaults(self, services) -> None:
        user = await services.users.register_user(UserRequest(email="New@Example.COM", name="  Newbie "))
        assert user.email == "new@example.com"
        assert user.name == "Newbie"
        assert user.rating == DEFAULT_RATING
        assert (user.total_ratings, user.rating_sum) == (0, 0)
        assert user.is_public and not user.is_admin and not user.is_banned

    async def test_email_unique_case_insensitive(self, services, alice) -> None:
        with pytest.raises(ConflictError):
            await services.users.register_user(UserRequest(email="ALICE@example.com", name="Impostor"))

    def test_skills_are_trimmed_and_deduplicated(self) -> None:
        request = UserRequest(email="x@example.com", name="X", skills_offered=[" Chess ", "Chess", "", "Go"])
        assert request.skills_offered == ["Chess", "Go"]

    def test_oversize_skill_rejected(self) -> None:
        with pytest.raises(SchemaValidationError):
            UserRequest(email="x@example.com", name="X", skills_offered=["x" * 51])

    def test_invalid_availability_rejected(self) -> None:
        with pytest.raises(SchemaValidationError):
            UserRequest(email="x@example.com", name="X", availability=["Midnights"])


class TestProfileUpdate:
    async def test_owner_updates_profile(self, services, alice) -> None:
        updated = await services.users.update_profile(
            alice.id, alice, ProfileRequest(bio="Home cook", skills_wanted=["Guitar", "Drums"], is_public=False)
        )
        assert updated.bio == "Home cook"
        assert updated.skills_wanted == ["Guitar", "Drums"]
        assert updated.skills_offered == ["Cooking", "Spanish"]
        assert updated.is_public is False

    async def test_name_is_trimmed(self, services, alice) -> None:
        updated = await services.users.update_profile(alice.id, alice, ProfileRequest(name="  Alicia  "))
        assert updated.name == "Alicia"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(SchemaValidationError):
            ProfileRequest(name="   ")

    async def test_empty_update_returns_current(self, services, alice) -> None:
        current = await services.users.update_profile(alice.id, alice, ProfileRequest())
        assert current.email == "alice@example.com"

    async def test_other_user_forbidden(self, services, alice, bob) -> None:
        with pytest.raises(ForbiddenError):
            await services.users.update_profile(alice.id, bob, ProfileRequest(bio="hacked"))

    async def test_banned_owner_forbidden(self, services, alice) -> None:
        with pytest.raises(ForbiddenError):
            await services.users.update_profile(
                alice.id, Principal(id=alice.id, is_banned=True), ProfileRequest(bio="back")
            )

    async def test_rating_state_not_writable(self, services, alice) -> None:
        repo_update = await services.users.update_profile(alice.id, alice, ProfileRequest(name="Alicia"))
        assert repo_update.rating == DEFAULT_RATING
        async with services.session.begin():
            user = await services.swaps._user_repo.update(alice.id, {"rating": 1.0, "is_admin": True, "bio": "ok"})
        assert user.rating == DEFAULT_RATING and not user.is_admin and user.bio == "ok"

    async def test_missing_user(self, services) -> None:
        with pytest.raises(NotFoundError):
            await services.users.get_user(5150)
