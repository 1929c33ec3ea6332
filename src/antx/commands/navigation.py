"""Browsing commands: ls, cd, pwd, stat, find, aliases."""

from __future__ import annotations

from antx.client import AntboxError
from antx.client.types import ROOT_UUID, Node
from antx.commands.parsing import parse_criteria
from antx.interactive.registry import Command, Suggestion, split_words
from antx.rendering import format_modified_date, human_readable_size, node_table


class LsCommand(Command):
    name = "ls"
    description = "List content of a folder"
    usage = "Usage: ls [folder-uuid]"

    async def execute(self, args: list[str]) -> None:
        if len(args) > 1:
            self.print_usage()
            return

        folder = self.resolve(args[0]) if args else self.ctx.navigation.current_uuid
        try:
            nodes = await self.list_folder(folder)
        except AntboxError as e:
            self.print_error(e)
            return

        self.ctx.navigation.cache_listing(nodes)
        if not nodes:
            self.console.print("[dim](empty)[/dim]")
            return
        self.console.print(node_table(nodes))

    async def list_folder(self, folder: str) -> list[Node]:
        client = self.ctx.client
        if folder == ROOT_UUID:
            return await client.list_nodes(folder)
        node = await client.get_node(folder)
        if node.is_smart_folder:
            return await client.evaluate_node(folder)
        return await client.list_nodes(folder)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) > 1:
            return []
        return self.suggest_folders(current)


class CdCommand(Command):
    name = "cd"
    description = "Change the current folder"
    usage = "Usage: cd [folder-uuid | ..]"

    async def execute(self, args: list[str]) -> None:
        if len(args) > 1:
            self.print_usage()
            return

        ctx = self.ctx
        nav = ctx.navigation
        if not args:
            ctx.go_root()
        elif args[0] == "..":
            if nav.current.is_root:
                return
            parent = nav.parent_uuid
            if parent == ROOT_UUID:
                ctx.go_root()
            elif not await self._enter(parent):
                return
        elif args[0] == ROOT_UUID:
            ctx.go_root()
        else:
            target = self.resolve(args[0])
            if target == nav.current_uuid:
                pass
            elif target == ROOT_UUID:
                ctx.go_root()
            elif not await self._enter(target):
                return

        await self.refresh()

    async def _enter(self, uuid: str) -> bool:
        try:
            node = await self.ctx.client.get_node(uuid)
        except AntboxError as e:
            self.print_error(e)
            return False
        if not node.is_folder:
            self.print_error(f"'{node.title}' is not a folder")
            return False
        self.ctx.enter(node)
        return True

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) > 1:
            return []
        suggestions = self.suggest_folders(current)
        if "..".startswith(current) and not self.ctx.navigation.current.is_root:
            suggestions.insert(0, Suggestion("..", "parent folder"))
        return suggestions


class PwdCommand(Command):
    name = "pwd"
    description = "Show the current location"
    usage = "Usage: pwd"

    async def execute(self, args: list[str]) -> None:
        nav = self.ctx.navigation
        if nav.current.is_root:
            self.console.print("/")
            return

        try:
            breadcrumbs = await self.ctx.client.get_breadcrumbs(nav.current_uuid)
        except AntboxError as e:
            self.print_error(e, "Error getting breadcrumbs")
            self.console.print(
                f"{nav.current_uuid}  {nav.current.title}", highlight=False, markup=False
            )
            return

        parts = [node.title for node in breadcrumbs if node.title]
        self.console.print("/" + "/".join(parts), highlight=False)


class StatCommand(Command):
    name = "stat"
    description = "Show node properties"
    usage = "Usage: stat <uuid>"

    async def execute(self, args: list[str]) -> None:
        if len(args) != 1:
            self.print_usage()
            return

        try:
            node = await self.ctx.client.get_node(self.resolve(args[0]))
        except AntboxError as e:
            self.print_error(e)
            return

        rows = [
            ("UUID", node.uuid),
            ("Title", node.title),
            ("Mimetype", node.mimetype),
            ("Parent", node.parent),
            ("Owner", node.owner),
        ]
        if node.group:
            rows.append(("Group", node.group))

        out = self.console
        for label, value in rows:
            out.print(f"{label:<11}: {value}", highlight=False, markup=False)

        if node.is_folder:
            out.print(f"{'Permissions':<11}:")
            perms = node.permissions
            for label, values in (
                ("Group", perms.group),
                ("Auth", perms.authenticated),
                ("Anonymous", perms.anonymous),
            ):
                if values:
                    out.print(f"  {label:<9}: {', '.join(values)}", highlight=False, markup=False)

        for label, value in (
            ("Size", human_readable_size(node.size)),
            ("Created at", node.created_time),
            ("Modified at", format_modified_date(node.modified_time)),
        ):
            out.print(f"{label:<11}: {value}", highlight=False, markup=False)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) > 1:
            return []
        return self.suggest_nodes(current)


class FindCommand(Command):
    name = "find"
    description = "Search nodes by content or criteria"
    usage = (
        "Usage: find <criteria>\n"
        "  Simple: find some text\n"
        "  Complex: find title == Document,owner ~= admin,size > 1000"
    )

    async def execute(self, args: list[str]) -> None:
        if not args:
            self.print_usage()
            return

        filters = parse_criteria(" ".join(args))
        if not filters:
            self.console.print("No valid filters found in criteria")
            return

        try:
            result = await self.ctx.client.find_nodes(filters)
        except AntboxError as e:
            self.print_error(e)
            return

        if not result.nodes:
            self.console.print("No nodes found matching the criteria")
            return

        self.ctx.navigation.cache_listing(result.nodes)
        self.console.print(f"Found {len(result.nodes)} nodes:")
        self.console.print(node_table(result.nodes))


class AliasesCommand(Command):
    name = "aliases"
    description = "Show the values of the . and .. aliases"
    usage = (
        "Usage: aliases\n\n"
        "Available aliases:\n"
        "  .   Current node UUID\n"
        "  ..  Parent node UUID"
    )

    async def execute(self, args: list[str]) -> None:
        if args:
            self.print_usage()
            return

        nav = self.ctx.navigation
        current = nav.current
        out = self.console
        out.print("[bold]Current Alias Values:[/bold]")
        out.print(
            f"  .  (current) = {current.uuid} ({'root' if current.is_root else current.title})",
            highlight=False,
            markup=False,
        )

        parent = nav.parent_uuid
        parent_title = "root"
        if parent != ROOT_UUID:
            try:
                parent_title = (await self.ctx.client.get_node(parent)).title
            except AntboxError:
                parent_title = "?"
        out.print(f"  .. (parent)  = {parent} ({parent_title})", highlight=False, markup=False)
