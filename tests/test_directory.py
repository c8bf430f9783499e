"""Tests for the public user directory, profiles, reviews and skill suggestions."""

import pytest

from skillswap.core.principal import Principal
from skillswap.exceptions import NotFoundError
from skillswap.models.definitions import Availability
from skillswap.schemas import DirectoryFilters, PageRequest
from tests.conftest import make_user, send_request


class TestSearchUsers:
    async def test_only_public_unbanned_and_not_self(self, services, alice, bob, carol, admin) -> None:
        await make_user(services, "hidden@example.com", ["Guitar"], is_public=False)
        await services.moderation.ban_user(carol.id, admin)

        page = await services.directory.search_users(viewer=alice)

        ids = {profile.id for profile in page.items}
        assert alice.id not in ids and carol.id not in ids
        assert bob.id in ids
        assert page.pagination.total == len(ids)

    async def test_skill_filter_is_case_insensitive_substring(self, services, alice, bob, carol) -> None:
        page = await services.directory.search_users(DirectoryFilters(skill="guit"))
        assert {p.id for p in page.items} == {alice.id, bob.id}

    async def test_skill_filter_matches_non_ascii_skill(self, services) -> None:
        tutor = await make_user(services, "rosa@example.com", ["Español"])
        await make_user(services, "sam@example.com", ["Espresso"])

        page = await services.directory.search_users(DirectoryFilters(skill="españ"))
        assert [p.id for p in page.items] == [tutor.id]

    async def test_skill_filter_does_not_span_entries(self, services) -> None:
        await make_user(services, "kim@example.com", ["Cooking", "Guitar"])

        page = await services.directory.search_users(DirectoryFilters(skill='g", "g'))
        assert page.items == []
        assert page.pagination.total == 0

    async def test_search_matches_name_location_bio(self, services) -> None:
        oslo = await make_user(services, "olga@example.com", ["Knitting"], location="Oslo, Norway")
        bio = await make_user(services, "pete@example.com", ["Chess"], bio="Former OSLO resident")
        await make_user(services, "zed@example.com", ["Chess"], location="Rome")

        page = await services.directory.search_users(DirectoryFilters(search="oslo"))
        assert {p.id for p in page.items} == {oslo.id, bio.id}

    async def test_location_and_availability(self, services) -> None:
        match = await make_user(
            services, "m@example.com", ["Chess"], location="Berlin", availability=[Availability.WEEKENDS]
        )
        await make_user(services, "n@example.com", ["Chess"], location="Berlin", availability=[Availability.EVENINGS])
        await make_user(services, "o@example.com", ["Chess"], location="Paris", availability=[Availability.WEEKENDS])

        page = await services.directory.search_users(
            DirectoryFilters(location="berlin", availability=Availability.WEEKENDS)
        )
        assert [p.id for p in page.items] == [match.id]

    async def test_wildcards_are_literal(self, services, alice, bob) -> None:
        page = await services.directory.search_users(DirectoryFilters(search="%"))
        assert page.items == []

    async def test_sorted_by_rating_and_paginated(self, services, alice, bob, carol) -> None:
        async with services.session.begin():
            await services.ratings.apply_rating(alice.id, 2)
            await services.ratings.apply_rating(carol.id, 4)

        first = await services.directory.search_users(DirectoryFilters(limit=2))
        second = await services.directory.search_users(DirectoryFilters(limit=2, page=2))

        assert [p.id for p in first.items] == [bob.id, carol.id]
        assert [p.id for p in second.items] == [alice.id]
        assert first.pagination.pages == 2

    async def test_public_profile_hides_rating_internals(self, services, bob) -> None:
        page = await services.directory.search_users()
        dumped = page.items[0].model_dump()
        assert "rating_sum" not in dumped and "total_ratings" not in dumped


class TestProfile:
    async def test_profile_with_stats(self, services, alice, bob) -> None:
        swap = await send_request(services, alice, bob, "Cooking", "Guitar")
        await services.swaps.accept_request(swap.id, bob)
        await services.swaps.complete_request(swap.id, alice, rating=4)

        view = await services.directory.get_profile(bob.id)

        assert view.profile.id == bob.id
        assert view.profile.rating == 4.0
        assert view.swap_stats.completed == 1
        assert view.completed_swaps == 1

    async def test_private_profile_only_for_owner(self, services) -> None:
        hidden = await make_user(services, "hidden@example.com", is_public=False)
        with pytest.raises(NotFoundError, match="private"):
            await services.directory.get_profile(hidden.id)
        assert (await services.directory.get_profile(hidden.id, viewer=hidden)).profile.id == hidden.id

    async def test_banned_profile_not_found_even_for_owner(self, services, alice, admin) -> None:
        await services.moderation.ban_user(alice.id, admin)
        with pytest.raises(NotFoundError):
            await services.directory.get_profile(alice.id, viewer=Principal(id=alice.id, is_banned=True))

    async def test_missing_profile(self, services) -> None:
        with pytest.raises(NotFoundError):
            await services.directory.get_profile(31337)


class TestReviews:
    async def test_only_completed_with_feedback(self, services, alice, bob) -> None:
        with_feedback = await send_request(services, alice, bob, "Cooking", "Guitar")
        silent = await send_request(services, alice, bob, "Spanish", "Guitar")
        await send_request(services, alice, bob, "Cooking", "Piano")
        for swap, feedback in [(with_feedback, "Patient and clear"), (silent, None)]:
            await services.swaps.accept_request(swap.id, bob)
            await services.swaps.complete_request(swap.id, alice, rating=5, feedback=feedback)

        reviews = await services.directory.get_reviews(bob.id)

        assert [r.id for r in reviews.items] == [with_feedback.id]
        assert reviews.items[0].feedback == "Patient and clear"

    async def test_blank_feedback_is_not_a_review(self, services, alice, bob) -> None:
        swap = await send_request(services, alice, bob, "Cooking", "Guitar")
        await services.swaps.accept_request(swap.id, bob)
        await services.swaps.complete_request(swap.id, alice, rating=5, feedback="   ")

        reviews = await services.directory.get_reviews(bob.id, PageRequest(limit=5))
        assert reviews.pagination.total == 0


class TestSkillSuggestions:
    async def test_counts_offered_and_wanted(self, services, alice, bob, carol) -> None:
        suggestions = await services.directory.skill_suggestions()
        counts = {s.skill: s.count for s in suggestions}
        # alice offers Cooking/Spanish wants Guitar; bob offers Guitar/Piano wants Cooking;
        # carol offers Yoga wants Piano
        assert counts == {"Cooking": 2, "Guitar": 2, "Piano": 2, "Spanish": 1, "Yoga": 1}
        assert [s.skill for s in suggestions][:3] == ["Cooking", "Guitar", "Piano"]

    async def test_query_filters_skills(self, services, alice, bob) -> None:
        suggestions = await services.directory.skill_suggestions("AN")
        assert {s.skill for s in suggestions} == {"Spanish", "Piano"}

    async def test_banned_users_do_not_contribute(self, services, alice, carol, admin) -> None:
        await services.moderation.ban_user(carol.id, admin)
        assert "Yoga" not in {s.skill for s in await services.directory.skill_suggestions()}
