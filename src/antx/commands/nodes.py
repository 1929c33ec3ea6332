"""Commands that create, copy, move and remove nodes."""

from __future__ import annotations

from pathlib import Path

from antx.client import AntboxError
from antx.commands.parsing import OPERATORS, convert_value
from antx.interactive.registry import Command, Suggestion, split_words, suggest_paths

DOWNLOADS_DIR = Path("~/Downloads")


def downloads_dir() -> Path:
    return DOWNLOADS_DIR.expanduser()


def download_name(title: str, uuid: str) -> str:
    """File name for a downloaded node; never leaves the downloads directory."""
    name = Path(title.replace("\\", "/")).name
    if name in ("", ".", ".."):
        return uuid
    return name


class MkdirCommand(Command):
    name = "mkdir"
    description = "Create a folder in the current folder"
    usage = "Usage: mkdir <name>"

    async def execute(self, args: list[str]) -> None:
        if not args:
            self.print_usage()
            return

        title = " ".join(args)
        try:
            await self.ctx.client.create_folder(self.ctx.navigation.current_uuid, title)
        except AntboxError as e:
            self.print_error(e)
            return
        await self.refresh()


class MksmartCommand(Command):
    name = "mksmart"
    description = "Create a smart folder in the current folder"
    usage = (
        "Usage: mksmart <name> <field> <operator> [value]\n"
        '  Example: mksmart "My Documents" title match document\n'
        '  Example: mksmart "Large Files" size > 1000000'
    )

    async def execute(self, args: list[str]) -> None:
        if len(args) < 3:
            self.print_usage()
            return

        title, field, operator = args[0], args[1], args[2]
        value = convert_value(" ".join(args[3:])) if len(args) > 3 else None
        filters = [[field, operator, value]]

        try:
            await self.ctx.client.create_smart_folder(
                self.ctx.navigation.current_uuid, title, filters
            )
        except AntboxError as e:
            self.print_error(e)
            return
        self.console.print(
            f"Smart folder '{title}' created successfully", highlight=False, markup=False
        )

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) == 3:
            return [Suggestion(op) for op in sorted(OPERATORS) if op.startswith(current)]
        return []


class CpCommand(Command):
    name = "cp"
    description = "Copy a node to a folder"
    usage = (
        "Usage: cp <source_uuid> <destination_uuid> [new_title]\n\n"
        "Examples:\n"
        "  cp abc123 def456\n"
        '  cp abc123 def456 "Copy of Document"'
    )

    async def execute(self, args: list[str]) -> None:
        if len(args) < 2:
            self.print_usage()
            return

        source, destination = self.resolve(args[0]), self.resolve(args[1])
        client = self.ctx.client
        try:
            if len(args) > 2:
                title = " ".join(args[2:])
            else:
                title = "Copy of " + (await client.get_node(source)).title
            copied = await client.copy_node(source, destination, title)
        except AntboxError as e:
            self.print_error(e, "Error copying node")
            return

        out = self.console
        out.print("Node copied successfully:")
        out.print(f"  Source: {source}", highlight=False, markup=False)
        out.print(f"  Destination: {destination}", highlight=False, markup=False)
        out.print(f"  New UUID: {copied.uuid}", highlight=False, markup=False)
        out.print(f"  Title: {copied.title}", highlight=False, markup=False)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) == 1:
            return self.suggest_nodes(current)
        if len(words) == 2:
            return self.suggest_folders(current)
        return []


class MvCommand(Command):
    name = "mv"
    description = "Move a node to another folder"
    usage = "Usage: mv <uuid> <destination-uuid>"

    async def execute(self, args: list[str]) -> None:
        if len(args) != 2:
            self.print_usage()
            return

        uuid, destination = self.resolve(args[0]), self.resolve(args[1])
        try:
            await self.ctx.client.move_node(uuid, destination)
        except AntboxError as e:
            self.print_error(e)
            return
        self.console.print(
            f"Node {uuid} moved to {destination} successfully", highlight=False, markup=False
        )

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) == 1:
            return self.suggest_nodes(current)
        if len(words) == 2:
            return self.suggest_folders(current)
        return []


class RenameCommand(Command):
    name = "rename"
    description = "Rename a node"
    usage = "Usage: rename <uuid> <new-name>"

    async def execute(self, args: list[str]) -> None:
        if len(args) < 2:
            self.print_usage()
            return

        uuid, title = self.resolve(args[0]), " ".join(args[1:])
        try:
            await self.ctx.client.rename_node(uuid, title)
        except AntboxError as e:
            self.print_error(e)
            return
        self.console.print(
            f"Node {uuid} renamed to '{title}' successfully", highlight=False, markup=False
        )

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        return self.suggest_nodes(current) if len(words) == 1 else []


class RmCommand(Command):
    name = "rm"
    description = "Remove a node"
    usage = "Usage: rm <uuid>"

    async def execute(self, args: list[str]) -> None:
        if len(args) != 1:
            self.print_usage()
            return

        uuid = self.resolve(args[0])
        try:
            await self.ctx.client.remove_node(uuid)
        except AntboxError as e:
            self.print_error(e)
            return
        self.console.print(f"Node {uuid} removed successfully", highlight=False, markup=False)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        return self.suggest_nodes(current) if len(words) == 1 else []


class DuplicateCommand(Command):
    name = "duplicate"
    description = "Duplicate a node in its folder"
    usage = "Usage: duplicate <uuid>"

    async def execute(self, args: list[str]) -> None:
        if len(args) != 1:
            self.print_usage()
            return

        uuid = self.resolve(args[0])
        try:
            duplicated = await self.ctx.client.duplicate_node(uuid)
        except AntboxError as e:
            self.print_error(e, "Error duplicating node")
            return

        self.console.print("Node duplicated successfully:")
        self.console.print(f"  Original UUID: {uuid}", highlight=False, markup=False)
        self.console.print(f"  New UUID: {duplicated.uuid}", highlight=False, markup=False)
        self.console.print(f"  Title: {duplicated.title}", highlight=False, markup=False)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        return self.suggest_nodes(current) if len(words) == 1 else []


class CloneCommand(DuplicateCommand):
    name = "clone"
    description = "Clone a node in the same location"
    usage = (
        "Usage: clone <uuid>\n\n"
        "  Create a clone of a node in the same location.\n"
        "  Same operation as 'duplicate'."
    )

    async def execute(self, args: list[str]) -> None:
        if len(args) != 1:
            self.print_usage()
            return

        uuid = self.resolve(args[0])
        client = self.ctx.client
        try:
            source = await client.get_node(uuid)
        except AntboxError as e:
            self.print_error(f"Cannot access node '{uuid}': {e}")
            return
        try:
            cloned = await client.duplicate_node(uuid)
        except AntboxError as e:
            self.print_error(f"Failed to clone node: {e}")
            return

        self.console.print("Node cloned successfully")
        self.console.print(f"  Original: {source.title} ({uuid})", highlight=False, markup=False)
        self.console.print(
            f"  Clone:    {cloned.title} ({cloned.uuid})", highlight=False, markup=False
        )


class UploadCommand(Command):
    name = "upload"
    description = "Upload a file to the current folder"
    usage = "Usage: upload [-u <uuid>] <file-path>"

    async def execute(self, args: list[str]) -> None:
        if not args:
            self.print_usage()
            return

        client = self.ctx.client
        if args[0] == "-u":
            if len(args) < 3:
                self.console.print("Usage: upload -u <uuid> <file-path>")
                return
            uuid, path = self.resolve(args[1]), " ".join(args[2:])
            try:
                node = await client.update_file(uuid, path)
            except AntboxError as e:
                self.print_error(e)
                return
            self.console.print(
                f"File {path} uploaded successfully to node {node.uuid}", highlight=False, markup=False
            )
            return

        path = " ".join(args)
        if not Path(path).expanduser().is_file():
            self.print_error(f"{path} is not a file")
            return
        try:
            node = await client.create_file(path, self.ctx.navigation.current_uuid)
        except AntboxError as e:
            self.print_error(e)
            return
        self.console.print(
            f"File {path} uploaded successfully to node {node.uuid}", highlight=False, markup=False
        )
        await self.refresh()

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) >= 2 and words[1] == "-u":
            if len(words) == 2:
                return self.suggest_nodes(current, lambda n: not n.is_folder)
            if len(words) == 3:
                return suggest_paths(current or str(downloads_dir()) + "/")
            return []
        if len(words) == 1:
            return suggest_paths(current)
        return []


class DownloadCommand(Command):
    name = "download"
    description = "Download a node to ~/Downloads"
    usage = "Usage: download <uuid>"

    async def execute(self, args: list[str]) -> None:
        if len(args) != 1:
            self.print_usage()
            return

        uuid = self.resolve(args[0])
        client = self.ctx.client
        try:
            node = await client.get_node(uuid)
        except AntboxError as e:
            self.print_error(e, "Error getting node details")
            return

        target = downloads_dir() / download_name(node.title, uuid)
        try:
            await client.download_node(uuid, target)
        except AntboxError as e:
            self.print_error(e)
            return
        self.console.print(
            f"Node '{node.title}' downloaded to {target}", highlight=False, markup=False
        )

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        return self.suggest_nodes(current, lambda n: not n.is_folder) if len(words) == 1 else []
