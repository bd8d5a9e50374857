"""CredentialStore — the single shared webhook API key."""

import secrets
import string
from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tracking_receiver.core.exceptions import StorageError
from tracking_receiver.db.models.app_option import AppOption
from tracking_receiver.db.upsert import build_upsert

logger = structlog.get_logger(__name__)

API_KEY_OPTION = "api_key"
API_KEY_ALPHABET = string.ascii_letters + string.digits
MIN_KEY_LENGTH = 24


def generate_api_key(length: int = MIN_KEY_LENGTH) -> str:
    """Generate a random alphanumeric key of at least MIN_KEY_LENGTH characters."""
    length = max(length, MIN_KEY_LENGTH)
    return "".join(secrets.choice(API_KEY_ALPHABET) for _ in range(length))


class CredentialStore:
    """Persists the API key as a named option row.

    Rotation is a single insert-or-replace; the previous key stops working
    as soon as the write commits. Concurrent rotations are last-write-wins.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], key_length: int = MIN_KEY_LENGTH):
        self.session_factory = session_factory
        self.key_length = key_length

    async def get_key(self) -> str | None:
        """Return the current key, or None if one was never generated."""
        async with self.session_factory() as session:
            result = await session.execute(select(AppOption.value).where(AppOption.name == API_KEY_OPTION))
            value = result.scalar_one_or_none()
        return value or None

    async def rotate_key(self) -> str:
        """Generate, persist and return a new key, invalidating the old one."""
        key = generate_api_key(self.key_length)
        now = datetime.now(UTC).replace(tzinfo=None)

        async with self.session_factory() as session:
            try:
                stmt = build_upsert(
                    session.bind.dialect.name,
                    AppOption,
                    {"name": API_KEY_OPTION, "value": key, "updated_at": now},
                    conflict_columns=["name"],
                    update_columns=["value", "updated_at"],
                )
                await session.execute(stmt)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("api_key_rotation_failed", error=str(e), error_type=type(e).__name__)
                raise StorageError("Failed to save API key") from e

        logger.info("api_key_rotated", key_length=len(key))
        return key

    async def get_or_create_key(self) -> str:
        """Return the current key, generating one on first use."""
        key = await self.get_key()
        if key:
            return key
        return await self.rotate_key()
