"""Functionality behind the routes."""

import logging
from typing import Any

from domain.auth import AuthService
from domain.errors import ChefbotError, ValidationError
from domain.models import DEFAULT_CATEGORY, RecipeRecord
from domain.pipeline import RecipePipeline
from domain.repository import Store


logger = logging.getLogger(__name__)


async def login(name: Any, phone: Any, *, auth: AuthService) -> dict[str, Any]:
    try:
        return await auth.register_or_login(name, phone)
    except ValidationError:
        raise
    except ChefbotError:
        logger.exception("Login failed for phone=%s", phone)
        raise


async def create_recipe(
    dish: Any,
    *,
    owner_phone: str,
    pipeline: RecipePipeline,
    store: Store,
    default_category: str = DEFAULT_CATEGORY,
) -> RecipeRecord:
    if not isinstance(dish, str) or not dish.strip():
        raise ValidationError("Dish name required")
    dish_name = dish.strip()

    logger.info("Generating recipe for %s (phone=%s)", dish_name, owner_phone)
    try:
        result = await pipeline.run(dish_name)
        return await store.create_recipe_record(
            owner_phone=owner_phone,
            dish_name=dish_name,
            category=default_category if result.category is None else result.category,
            recipe=result.recipe or "",
        )
    except ChefbotError:
        logger.exception("Recipe failed for dish=%s phone=%s", dish_name, owner_phone)
        raise


async def recipe_history(
    owner_phone: str,
    *,
    store: Store,
    limit: int | None = None,
) -> list[RecipeRecord]:
    if limit is not None and limit < 1:
        raise ValidationError("limit must be a positive integer")
    try:
        return await store.list_recipe_records_by_owner(owner_phone, limit=limit)
    except ChefbotError:
        logger.exception("History failed for phone=%s", owner_phone)
        raise
