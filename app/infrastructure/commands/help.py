"""Plain-text help pages for a command tree.

Queries resolve in order: no query gives the category index, a category
name (any case) lists its commands, a command path gives the command page,
and anything else gets a not-found message.
"""

from typing import List, Optional

from infrastructure.commands.cooldowns import describe_expire_age
from infrastructure.commands.models import real_category_name
from infrastructure.commands.tree import CommandNode, CommandTree

# Categories longer than this are listed inline instead of one per line
SINGLE_COLUMN_LIMIT = 20


class HelpRenderer:
    """Render help text for commands and categories.

    Example:
        renderer = HelpRenderer(prefix="!")
        ctx.respond(renderer.query(tree, "food fruit add"))
    """

    def __init__(self, prefix: str = "!"):
        self.prefix = prefix

    def query(self, tree: CommandTree, query: Optional[str] = None) -> str:
        if not query:
            return self.render_index(tree)

        folded = query.casefold()
        for category in tree.categories:
            if category.casefold() == folded:
                return self.render_category(tree, category)

        path = query
        if path.startswith("/"):
            path = path[1:]
        elif path.startswith(self.prefix):
            path = path[len(self.prefix) :]
        node = tree.find(path.split())
        if node is not None:
            return self.render_command(node)

        return f"No command or category `{query}` found."

    def render_index(self, tree: CommandTree) -> str:
        lines = ["Command categories:"]
        for category, nodes in sorted(tree.categories.items()):
            lines.append(f"  {category} ({len(nodes)})")
        lines.append(f"Use {self.prefix}help <category or command> for details.")
        return "\n".join(lines)

    def render_category(self, tree: CommandTree, category: str) -> str:
        nodes = tree.categories.get(category, [])
        if not nodes:
            return f"{category} Commands\nNo commands!"
        if len(nodes) <= SINGLE_COLUMN_LIMIT:
            body = "\n".join(f"{self.prefix}{self._signature(n)}" for n in nodes)
        else:
            body = ", ".join(f"`{self.prefix}{n.full_name}`" for n in nodes)
        return f"{category} Commands\n{body}"

    def render_command(self, node: CommandNode) -> str:
        """Full page for one command: usage, description, metadata, arguments, examples."""
        cooldown = (
            describe_expire_age(node.cooldown.cooldown) if node.cooldown else "None"
        )
        lines: List[str] = [
            f"{self.prefix}{self._signature(node)}",
            node.description or "No description.",
            f"Category: {real_category_name(node.category)}",
            f"Permission: {node.permission}",
            f"Cooldown: {cooldown}",
        ]

        if node.is_leaf:
            visible = [a for a in node.arguments.arguments() if not a.hidden]
            if visible:
                lines.append("Arguments:")
                for argument in visible:
                    label = f"--{argument.name}" if argument.named else argument.name
                    lines.append(f"  {label} - {argument.description}")
        else:
            lines.append("Subcommands:")
            for child in node.children.values():
                lines.append(f"  {child.name} - {child.description}")

        if node.examples:
            lines.append("Examples:")
            for example in node.examples:
                lines.append(f"  {self.prefix}{node.full_name} {example}".rstrip())
        return "\n".join(lines)

    def _signature(self, node: CommandNode) -> str:
        usage = node.usage()
        return f"{node.full_name} {usage}" if usage else node.full_name
