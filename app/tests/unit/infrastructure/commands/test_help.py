"""Unit tests for HelpRenderer."""

import pytest
from infrastructure.commands.cooldowns import StandardCooldowns
from infrastructure.commands.help import HelpRenderer
from infrastructure.commands.models import (
    ArgumentType,
    CommandDefinition,
    DefaultCommandCategory,
)
from tests.factories.commands import make_argument, make_definition, make_tree


@pytest.fixture
def tree():
    inherit = DefaultCommandCategory.INHERIT
    food = CommandDefinition(
        name="food",
        description="Manages a food database.",
        category="Fun",
        cooldown=StandardCooldowns.LOW,
        subcommands=[
            make_definition(
                "add",
                description="Adds a food.",
                category=inherit,
                args=[make_argument("name", arg_type=ArgumentType.REST_OF_CONTENT, description="Food name.")],
                examples=["apple"],
            ),
            make_definition("list", description="Lists foods.", category=inherit),
        ],
    )
    ping = make_definition("ping", description="Pong.")
    secret = make_definition("debug", category=DefaultCommandCategory.SECRET)
    return make_tree(food, ping, secret)


@pytest.fixture
def renderer():
    return HelpRenderer(prefix="!")


class TestHelpQuery:
    def test_index(self, renderer, tree):
        assert renderer.query(tree) == (
            "Command categories:\n"
            "  Fun (2)\n"
            "  Utility (1)\n"
            "Use !help <category or command> for details."
        )

    def test_category_ignores_case(self, renderer, tree):
        assert renderer.query(tree, "fun") == (
            "Fun Commands\n!food add <name>\n!food list"
        )

    def test_hidden_category_not_found(self, renderer, tree):
        assert renderer.query(tree, "Secret") == "No command or category `Secret` found."

    def test_command_page(self, renderer, tree):
        assert renderer.query(tree, "food add") == (
            "!food add <name>\n"
            "Adds a food.\n"
            "Category: Fun\n"
            "Permission: Everyone\n"
            "Cooldown: None\n"
            "Arguments:\n"
            "  name - Food name.\n"
            "Examples:\n"
            "  !food add apple"
        )

    def test_nested_command_page(self, renderer, tree):
        page = renderer.query(tree, "/food")

        assert page.splitlines()[:2] == ["!food (add | list)", "Manages a food database."]
        assert "Cooldown: 3 seconds" in page
        assert "Subcommands:\n  add - Adds a food.\n  list - Lists foods." in page

    def test_prefixed_query(self, renderer, tree):
        assert renderer.query(tree, "!ping").startswith("!ping\nPong.")

    def test_not_found(self, renderer, tree):
        assert renderer.query(tree, "nope") == "No command or category `nope` found."

    def test_long_category_inline(self, renderer):
        commands = [make_definition(f"c{i}") for i in range(21)]

        page = renderer.render_category(make_tree(*commands), "Utility")

        assert page.startswith("Utility Commands\n`!c0`, `!c1`")
