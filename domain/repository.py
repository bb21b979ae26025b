from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import AsyncIterator, Callable, Self
from uuid import uuid4

from databases import Database

from domain.errors import StoreError
from domain.models import DEFAULT_CATEGORY, RecipeRecord, User


logger = logging.getLogger(__name__)


CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id VARCHAR(64) PRIMARY KEY,
    name VARCHAR(256) NOT NULL,
    phone VARCHAR(10) NOT NULL UNIQUE,
    created_at VARCHAR(32) NOT NULL
)
"""


CREATE_RECIPE_REQUESTS_TABLE = """
CREATE TABLE IF NOT EXISTS recipe_requests (
    id VARCHAR(64) PRIMARY KEY,
    owner_phone VARCHAR(10) NOT NULL REFERENCES users (phone),
    dish_name VARCHAR(256) NOT NULL,
    category VARCHAR(64) NOT NULL DEFAULT 'Gourmet',
    recipe TEXT NOT NULL,
    created_at VARCHAR(32) NOT NULL
)
"""


CREATE_RECIPE_REQUESTS_INDEX = """
CREATE INDEX IF NOT EXISTS ix_recipe_requests_owner_phone
ON recipe_requests (owner_phone, created_at)
"""


# First write wins, a second login with the same phone keeps the first row.
CREATE_USER = """
INSERT INTO users (id, name, phone, created_at)
VALUES (:id, :name, :phone, :created_at)
ON CONFLICT (phone) DO NOTHING
"""


GET_USER_BY_PHONE = "SELECT * FROM users WHERE phone = :phone"


CREATE_RECIPE_REQUEST = """
INSERT INTO recipe_requests (id, owner_phone, dish_name, category, recipe, created_at)
VALUES (:id, :owner_phone, :dish_name, :category, :recipe, :created_at)
"""


LIST_RECIPE_REQUESTS_BY_OWNER = """
SELECT * FROM recipe_requests WHERE owner_phone = :owner_phone
ORDER BY created_at DESC
"""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(dt: datetime) -> str:
    """Fixed width ISO-8601 in UTC, so the strings sort like the times."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class Store:
    """Users and the recipes they asked for."""

    def __init__(
        self,
        db: Database,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.clock = clock

    @classmethod
    def from_url(cls, url: str) -> Self:
        return cls(Database(url))

    @asynccontextmanager
    async def _errors(self, action: str) -> AsyncIterator[None]:
        try:
            yield
        except StoreError:
            raise
        except Exception as e:
            logger.error("Store failed to %s: %r", action, e)
            raise StoreError(f"Could not {action}.") from e

    async def connect(self) -> None:
        async with self._errors("connect"):
            await self.db.connect()

    async def disconnect(self) -> None:
        await self.db.disconnect()

    async def create_tables(self) -> None:
        async with self._errors("create tables"):
            for query in (
                CREATE_USERS_TABLE,
                CREATE_RECIPE_REQUESTS_TABLE,
                CREATE_RECIPE_REQUESTS_INDEX,
            ):
                await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                    query=query
                )

    async def find_user_by_phone(self, phone: str) -> User | None:
        async with self._errors("find user"):
            row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
                GET_USER_BY_PHONE, values={"phone": phone}
            )
        return None if row is None else User.from_row(row)

    async def create_user(self, *, name: str, phone: str) -> User:
        """Insert a user unless the phone is taken. Returns the stored user."""
        async with self._errors("create user"):
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                CREATE_USER,
                values={
                    "id": uuid4().hex,
                    "name": name,
                    "phone": phone,
                    "created_at": timestamp(self.clock()),
                },
            )
        user = await self.find_user_by_phone(phone)
        if user is None:
            raise StoreError(f"User {phone} missing after insert.")
        return user

    async def create_recipe_record(
        self,
        *,
        owner_phone: str,
        dish_name: str,
        recipe: str,
        category: str | None = None,
    ) -> RecipeRecord:
        record = RecipeRecord(
            id=uuid4().hex,
            owner_phone=owner_phone,
            dish_name=dish_name,
            category=DEFAULT_CATEGORY if category is None else category,
            recipe=recipe,
            created_at=timestamp(self.clock()),
        )
        async with self._errors("create recipe record"):
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                CREATE_RECIPE_REQUEST,
                values={
                    "id": record.id,
                    "owner_phone": record.owner_phone,
                    "dish_name": record.dish_name,
                    "category": record.category,
                    "recipe": record.recipe,
                    "created_at": record.created_at,
                },
            )
        return record

    async def list_recipe_records_by_owner(
        self, phone: str, *, limit: int | None = None
    ) -> list[RecipeRecord]:
        query = LIST_RECIPE_REQUESTS_BY_OWNER
        values: dict[str, str | int] = {"owner_phone": phone}
        if limit is not None:
            query += " LIMIT :limit"
            values["limit"] = limit
        async with self._errors("list recipe records"):
            rows = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
                query, values=values
            )
        return [RecipeRecord.from_row(r) for r in rows]
