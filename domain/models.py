from typing import Any, Mapping, Self

from markdown2 import (  # pyright: ignore[reportMissingTypeStubs]
    markdown,  # pyright: ignore[reportUnknownVariableType]
)


DEFAULT_CATEGORY = "Gourmet"


class User:
    def __init__(self, *, id: str, name: str, phone: str, created_at: str) -> None:
        self.id = id
        self.name = name
        self.phone = phone
        self.created_at = created_at

    def __repr__(self) -> str:
        return f"<User(id={self.id}, phone={self.phone})>"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        return cls(
            id=row["id"],
            name=row["name"],
            phone=row["phone"],
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "createdAt": self.created_at,
        }


class RecipeRecord:
    def __init__(
        self,
        *,
        id: str,
        owner_phone: str,
        dish_name: str,
        recipe: str,
        created_at: str,
        category: str = DEFAULT_CATEGORY,
    ) -> None:
        self.id = id
        self.owner_phone = owner_phone
        self.dish_name = dish_name
        self.category = category
        self.recipe = recipe
        self.created_at = created_at

    def __repr__(self) -> str:
        return f"<RecipeRecord(id={self.id}, dish_name={self.dish_name})>"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        return cls(
            id=row["id"],
            owner_phone=row["owner_phone"],
            dish_name=row["dish_name"],
            category=row["category"],
            recipe=row["recipe"],
            created_at=row["created_at"],
        )

    @property
    def html(self) -> str:
        return markdown(  # pyright: ignore[reportUnknownVariableType]
            self.recipe, extras=["tables"]
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "ownerPhone": self.owner_phone,
            "dishName": self.dish_name,
            "category": self.category,
            "recipe": self.recipe,
            "html": self.html,
            "createdAt": self.created_at,
        }
