"""Food database: a nested command with subcommand groups and shared data.

    !food fruit add dragon fruit
    !food fruit list
    !food list
    !food clear
"""

from enum import Enum
from typing import Dict, List

from infrastructure.commands import (
    Argument,
    ArgumentType,
    CommandContext,
    CommandRegistry,
    StandardCooldowns,
)


class FoodGroup(str, Enum):
    FRUIT = "Fruit"
    VEGETABLE = "Vegetable"
    GRAIN = "Grain"
    MEAT = "Meat"
    DAIRY = "Dairy"
    OTHER = "Other"


class SharedFoodData:
    """Foods per group, shared by every food subcommand."""

    def __init__(self):
        self._data: Dict[FoodGroup, List[str]] = {}
        self.clear()

    def add(self, group: FoodGroup, food: str) -> None:
        if food not in self._data[group]:
            self._data[group].append(food)

    def remove(self, group: FoodGroup, food: str) -> None:
        if food in self._data[group]:
            self._data[group].remove(food)

    def describe(self, group: FoodGroup) -> str:
        return ", ".join(self._data[group]) or "None!"

    def clear(self) -> None:
        self._data = {group: [] for group in FoodGroup}


FOOD_ARGS = [
    Argument("food", type=ArgumentType.REST_OF_CONTENT, description="Food name.")
]


def _register_group(registry: CommandRegistry, group: FoodGroup) -> None:
    path = f"food {group.value.lower()}"
    registry.group(
        group.value.lower(),
        description=f"Manages the database for the {group.value} food group.",
        parent="food",
    )

    @registry.subcommand(
        path, "add", description="Adds a food to this group.", args=FOOD_ARGS
    )
    def add(ctx: CommandContext, food: str):
        ctx.command.shared.add(group, food)
        ctx.respond(f'Added "{food}" to {group.value}.')

    @registry.subcommand(
        path, "remove", description="Removes a food from this group.", args=FOOD_ARGS
    )
    def remove(ctx: CommandContext, food: str):
        ctx.command.shared.remove(group, food)
        ctx.respond(f'Removed "{food}" from {group.value}.')

    @registry.subcommand(
        path, "list", description="Lists all of the food in this group."
    )
    def list_group(ctx: CommandContext):
        shared: SharedFoodData = ctx.command.shared
        ctx.respond(f"Food Group: {group.value}\n{shared.describe(group)}")


def list_all(ctx: CommandContext):
    shared: SharedFoodData = ctx.command.shared
    lines = [f"{group.value} Group: {shared.describe(group)}" for group in FoodGroup]
    ctx.respond("All Foods\n" + "\n".join(lines))


def clear_all(ctx: CommandContext):
    ctx.command.shared.clear()
    ctx.respond("Successfully cleared all groups.")


def register(registry: CommandRegistry) -> None:
    """Register the food command tree on registry."""
    registry.group(
        "food",
        description="Manages a food database.",
        category="Fun",
        cooldown=StandardCooldowns.LOW,
        shared_factory=SharedFoodData,
    )
    for group in FoodGroup:
        _register_group(registry, group)
    registry.subcommand("food", "list", description="List all foods.")(list_all)
    registry.subcommand("food", "clear", description="Clears all groups.")(clear_all)
