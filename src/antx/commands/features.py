"""Actions, extensions, templates and docs."""

from __future__ import annotations

from rich.markdown import Markdown
from rich.markup import escape

from antx.client import AntboxError
from antx.client.types import Feature
from antx.commands.nodes import downloads_dir
from antx.commands.parsing import parse_params
from antx.interactive.registry import Command, Suggestion, split_words
from antx.rendering import human_readable_size, print_json


def _suggest_features(features: list[Feature], word: str) -> list[Suggestion]:
    word = word.lower()
    return [
        Suggestion(f.uuid, f.name)
        for f in features
        if f.uuid.lower().startswith(word) or f.name.lower().startswith(word)
    ]


class _FeatureListCommand(Command):
    kind = ""

    async def fetch(self) -> list[Feature]:
        raise NotImplementedError

    async def execute(self, args: list[str]) -> None:
        try:
            features = await self.fetch()
        except AntboxError as e:
            self.print_error(e, f"Error listing {self.kind}s")
            return
        setattr(self.ctx.resources, f"{self.kind}s", features)

        if not features:
            self.console.print(f"No {self.kind}s available.")
            return

        out = self.console
        out.print(f"Available {self.kind}s ({len(features)}):\n")
        for feature in sorted(features, key=lambda f: f.name):
            self.print_feature(feature)
            out.print()

    def print_feature(self, feature: Feature) -> None:
        out = self.console
        out.print(f"[bold]UUID:[/bold] {escape(feature.uuid)}", highlight=False)
        out.print(f"  Name: {feature.name}", highlight=False, markup=False)
        if feature.description:
            out.print(f"  Description: {feature.description}", highlight=False, markup=False)
        if self.kind == "action":
            out.print(f"  Run Manually: {feature.run_manually}")
            out.print(f"  Run on Creates: {feature.run_on_creates}")
            out.print(f"  Run on Updates: {feature.run_on_updates}")
            if feature.filters:
                out.print("  Node Filtering: enabled")
        if feature.run_as:
            out.print(f"  Run As: {feature.run_as}", highlight=False, markup=False)
        if feature.groups_allowed:
            out.print(
                f"  Groups Allowed: {', '.join(feature.groups_allowed)}", highlight=False, markup=False
            )
        if feature.parameters:
            out.print("  Parameters:")
            for param in feature.parameters:
                required = " (required)" if param.required else ""
                out.print(
                    f"    - {param.name} ({param.type}){required}: {param.description}",
                    highlight=False,
                    markup=False,
                )
                if param.default_value is not None:
                    out.print(
                        f"      Default: {param.default_value}", highlight=False, markup=False
                    )


class ActionsCommand(_FeatureListCommand):
    name = "actions"
    description = "List available actions"
    usage = "Usage: actions"
    kind = "action"

    async def fetch(self) -> list[Feature]:
        return await self.ctx.client.list_actions()


class ExtensionsCommand(_FeatureListCommand):
    name = "extensions"
    description = "List available extensions"
    usage = "Usage: extensions"
    kind = "extension"

    async def fetch(self) -> list[Feature]:
        return await self.ctx.client.list_extensions()


class RunCommand(Command):
    name = "run"
    description = "Run an action on a node"
    usage = (
        "Usage: run <action_uuid> <node_uuid> [param=value...]\n\n"
        "Examples:\n"
        "  run abc123 def456\n"
        "  run abc123 def456 format=pdf quality=high"
    )

    async def execute(self, args: list[str]) -> None:
        if len(args) < 2:
            self.print_usage()
            return

        action, node = args[0], self.resolve(args[1])
        params, rejected = parse_params(args[2:])
        for token in rejected:
            self.console.print(
                f"[yellow]Warning:[/yellow] Ignoring invalid parameter format: {escape(token)} "
                "(expected key=value)",
                highlight=False,
            )

        try:
            result = await self.ctx.client.run_action(action, [node], params)
        except AntboxError as e:
            self.print_error(e, "Error running action")
            return
        self.console.print("Action executed successfully:")
        print_json(self.console, result)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) == 1:
            return _suggest_features(self.ctx.resources.actions, current)
        if len(words) == 2:
            return self.suggest_nodes(current)
        return []


class ExecCommand(Command):
    name = "exec"
    description = "Run an extension"
    usage = (
        "Usage: exec <extension_uuid> [param=value...]\n\n"
        "Examples:\n"
        "  exec abc123\n"
        "  exec abc123 input=hello format=json timeout=30"
    )

    async def execute(self, args: list[str]) -> None:
        if not args:
            self.print_usage()
            return

        params, rejected = parse_params(args[1:])
        for token in rejected:
            self.console.print(
                f"[yellow]Warning:[/yellow] Ignoring invalid parameter format: {escape(token)} "
                "(expected key=value)",
                highlight=False,
            )

        try:
            result = await self.ctx.client.run_extension(args[0], params)
        except AntboxError as e:
            self.print_error(e, "Error running extension")
            return
        self.console.print("Extension executed successfully:")
        print_json(self.console, result)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) == 1:
            return _suggest_features(self.ctx.resources.extensions, current)
        if len(words) >= 2 and "=" not in current:
            extension = next(
                (e for e in self.ctx.resources.extensions if e.uuid == words[1]), None
            )
            if extension is not None:
                given = {w.partition("=")[0] for w in words[2:]}
                return [
                    Suggestion(f"{p.name}=", p.description)
                    for p in extension.parameters
                    if p.name.startswith(current) and p.name not in given
                ]
        return []


class CallCommand(ExecCommand):
    name = "call"
    usage = ExecCommand.usage.replace("exec", "call")


class TemplatesCommand(Command):
    name = "templates"
    description = "List templates or download one"
    usage = "Usage: templates [uuid]"

    async def execute(self, args: list[str]) -> None:
        if args:
            template = self.ctx.registry.lookup("template")
            if template is not None:
                await template.execute(args[:1])
            return

        try:
            templates = await self.ctx.client.list_templates()
        except AntboxError as e:
            self.print_error(e, "Error listing templates")
            return

        if not templates:
            self.console.print("No templates available.")
            return

        self.console.print("Available templates:\n")
        for template in templates:
            self.console.print(f"[bold]UUID:[/bold] {escape(template.uuid)}", highlight=False)
            self.console.print(f"  Mimetype: {template.mimetype}", highlight=False, markup=False)
            self.console.print(f"  Size: {human_readable_size(template.size)}")
            self.console.print()


class TemplateCommand(Command):
    name = "template"
    description = "Download a template to ~/Downloads"
    usage = "Usage: template <uuid>"

    async def execute(self, args: list[str]) -> None:
        if len(args) != 1:
            self.print_usage()
            return

        uuid = args[0]
        try:
            content = await self.ctx.client.get_template(uuid)
        except AntboxError as e:
            self.print_error(e, "Error getting template")
            return

        target = downloads_dir() / f"template_{uuid}.txt"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            self.print_error(e, "Error writing template file")
            return
        self.console.print(f"Template downloaded to {target}", highlight=False, markup=False)


class DocsCommand(Command):
    name = "docs"
    description = "List documentation or show a document"
    usage = "Usage: docs [uuid]"

    async def execute(self, args: list[str]) -> None:
        client = self.ctx.client
        if args:
            try:
                content = await client.get_doc(args[0])
            except AntboxError as e:
                self.print_error(e, "Error getting document")
                return
            self.console.print(Markdown(content))
            return

        try:
            docs = await client.list_docs()
        except AntboxError as e:
            self.print_error(e, "Error listing documents")
            return

        if not docs:
            self.console.print("No documents available.")
            return
        self.console.print("Available documents:\n")
        for doc in docs:
            self.console.print(f"[bold]UUID:[/bold] {escape(doc.uuid)}", highlight=False)
            self.console.print(f"  Description: {doc.description}", highlight=False, markup=False)
            self.console.print()
