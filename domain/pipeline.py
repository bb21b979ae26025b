"""The recipe pipeline.

An ordered list of stages. Each stage makes one call to the model and returns
a partial update for the state. Updates are merged "last non-null wins": a
field a stage leaves out, or sets to None, keeps whatever it had before.

Two shapes are in use:

- two stage: categorize the dish, then generate the recipe for that category.
- guarded: one call that refuses anything that is not food, else generates.
"""

from enum import Enum
import logging
from typing import Awaitable, Callable, Mapping, Self, Sequence

from domain.aopenai import ModelClient
from domain.errors import EmptyInputError, ModelUnavailableError
from domain.prompts import CategorizePrompt, GeneratePrompt, GuardedPrompt


logger = logging.getLogger(__name__)


StateUpdate = Mapping[str, str | None]
Stage = Callable[["RecipeRequestState", ModelClient], Awaitable[StateUpdate]]


class RecipeRequestState:
    FIELDS = ("dish_name", "category", "recipe")

    def __init__(
        self,
        dish_name: str,
        category: str | None = None,
        recipe: str | None = None,
    ) -> None:
        self.dish_name = dish_name
        self.category = category
        self.recipe = recipe

    def __repr__(self) -> str:
        return (
            f"<RecipeRequestState(dish_name={self.dish_name!r}, "
            f"category={self.category!r}, has_recipe={self.recipe is not None})>"
        )

    def merge(self, update: StateUpdate) -> Self:
        unknown = set(update) - set(self.FIELDS)
        if unknown:
            raise KeyError(f"Unknown state fields: {sorted(unknown)}")
        values = {field: getattr(self, field) for field in self.FIELDS}
        for field, value in update.items():
            if value is not None:
                values[field] = value
        return type(self)(**values)

    def to_dict(self) -> dict[str, str | None]:
        return {"category": self.category, "recipe": self.recipe}


async def _complete(model: ModelClient, prompt: object) -> str:
    try:
        text = await model.complete(str(prompt))
    except ModelUnavailableError:
        raise
    except Exception as e:
        logger.error("Model client failed: %r", e)
        raise ModelUnavailableError("Model call failed.") from e
    if not text:
        raise ModelUnavailableError("Model returned no content.")
    return text


async def categorize(state: RecipeRequestState, model: ModelClient) -> StateUpdate:
    text = await _complete(model, CategorizePrompt(state.dish_name))
    # Not checked against CATEGORIES, whatever the model says goes.
    return {"category": text.strip()}


async def generate(state: RecipeRequestState, model: ModelClient) -> StateUpdate:
    text = await _complete(model, GeneratePrompt(state.dish_name, state.category))
    return {"recipe": text}


async def guarded_generate(
    state: RecipeRequestState, model: ModelClient
) -> StateUpdate:
    text = await _complete(model, GuardedPrompt(state.dish_name))
    return {"recipe": text}


class PipelineVariant(Enum):
    two_stage = "two-stage"
    guarded = "guarded"


STAGES: dict[PipelineVariant, tuple[Stage, ...]] = {
    PipelineVariant.two_stage: (categorize, generate),
    PipelineVariant.guarded: (guarded_generate,),
}


class RecipePipeline:
    def __init__(self, stages: Sequence[Stage], *, model: ModelClient) -> None:
        if not stages:
            raise ValueError("A pipeline needs at least one stage.")
        self.stages = tuple(stages)
        self.model = model

    @classmethod
    def from_variant(cls, variant: PipelineVariant, *, model: ModelClient) -> Self:
        return cls(STAGES[variant], model=model)

    async def run(self, dish_name: str) -> RecipeRequestState:
        if not dish_name or not dish_name.strip():
            raise EmptyInputError("Dish name required")

        state = RecipeRequestState(dish_name=dish_name.strip())
        for stage in self.stages:
            name = getattr(stage, "__name__", repr(stage))
            logger.info("Running %s for %s", name, state.dish_name)
            state = state.merge(await stage(state, self.model))

        if state.recipe is None:
            raise ModelUnavailableError("Pipeline finished without a recipe.")
        return state
