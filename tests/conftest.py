from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

from databases import Database
import pytest
import pytest_asyncio

from domain.repository import Store


class FakeModel:
    """Answers prompts from a script, in order. Exceptions in the script are raised."""

    def __init__(self, *answers: str | Exception) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


class TickingClock:
    def __init__(
        self,
        start: datetime | None = None,
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.now = (
            datetime(2024, 1, 1, tzinfo=timezone.utc) if start is None else start
        )
        self.step = step

    def __call__(self) -> datetime:
        now = self.now
        self.now += self.step
        return now


RECIPE = """| Ingredient | Quantity |
|------------|----------|
| Paneer     | 250 g    |
| Yogurt     | 100 g    |

## Instructions
1. **Cube** the paneer.
2. **Marinate** in yogurt for 30 minutes.
3. **Grill** until charred.
"""


def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'chefbot.db'}"


@pytest.fixture
def clock() -> Iterator[TickingClock]:
    yield TickingClock()


@pytest_asyncio.fixture
async def store(tmp_path: Path, clock: TickingClock):
    store = Store(Database(db_url(tmp_path)), clock=clock)
    await store.connect()
    await store.create_tables()
    yield store
    await store.disconnect()
