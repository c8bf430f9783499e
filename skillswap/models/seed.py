import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .definitions import User

logger = logging.getLogger(__name__)

# --- STATIC DATA DEFINITIONS ---

# Demo members. Structure: (name, email, location, skills_offered, skills_wanted, availability, is_admin)
USERS_SEED_DATA: list[tuple[str, str, str, list[str], list[str], list[str], bool]] = [
    ("Admin", "admin@skillswap.dev", "Remote", [], [], [], True),
    ("Maya Patel", "maya@skillswap.dev", "Austin, TX", ["Cooking", "Spanish"], ["Guitar"], ["Weekends"], False),
    ("Leo Grant", "leo@skillswap.dev", "Denver, CO", ["Guitar", "Photography"], ["Cooking"], ["Evenings"], False),
    ("Ana Silva", "ana@skillswap.dev", "Lisbon", ["Python", "Spanish"], ["Photography"], ["Weekdays"], False),
    ("Sam Okafor", "sam@skillswap.dev", "Lagos", ["Yoga"], ["Python", "Guitar"], ["Mornings", "Weekends"], False),
]


# --- SEEDING FUNCTIONS ---


async def initialize_users(session: AsyncSession) -> dict[str, User]:
    """
    Creates the demo users that do not exist yet, keyed by email.
    """
    logger.info("Initializing demo users")
    user_map: dict[str, User] = {}

    for name, email, location, offered, wanted, availability, is_admin in USERS_SEED_DATA:
        existing_user = (await session.scalars(select(User).where(User.email == email))).one_or_none()

        if existing_user:
            logger.info("[Skipped] User %s already exists", email)
            user_map[email] = existing_user
            continue

        new_user = User(
            name=name,
            email=email,
            location=location,
            skills_offered=offered,
            skills_wanted=wanted,
            availability=availability,
            is_admin=is_admin,
        )
        session.add(new_user)
        user_map[email] = new_user
        logger.info("[Created] %s <%s>", name, email)

    await session.commit()
    return user_map


async def run_seeding(session: AsyncSession) -> dict[str, User]:
    """
    The main entry point to execute all seeding functions.
    """
    try:
        users = await initialize_users(session)
    except IntegrityError:
        await session.rollback()
        logger.error("Seeding failed due to Integrity Error (duplicate email). Transaction rolled back.")
        raise
    logger.info("All demo data has been seeded")
    return users
