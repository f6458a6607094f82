"""Top-level commands: help, about, exit, prompt, show, init-logger, load-plugin."""

from __future__ import annotations

from pathlib import Path

from ledger_shell.cli.errors import ExecutionError, ShellIOError
from ledger_shell.cli.logger import LoggerConfigError, init_logger
from ledger_shell.cli.output import Message, Notice, command_help, general_help, group_help
from ledger_shell.cli.registry import HELP, CommandRegistry, CommandSpec, ParamSpec


def _about(ctx, sdk, params):
    return [
        Message("Ledger shell: an interactive and batch command shell for ledger clients."),
        "Manage wallets, DIDs and pool connections, and build, sign and send ledger transactions.",
        "Type \"help\" to list the available command groups.",
    ]


def _exit(ctx, sdk, params):
    ctx.exit_requested = True
    return Message("Goodbye...")


def _prompt(ctx, sdk, params):
    ctx.base_prompt = params["prompt"]
    return Message(f"Command prompt has been set to \"{params['prompt']}\"")


def _show(ctx, sdk, params):
    path = Path(params["file"]).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ShellIOError(f"Can't read file {path}: {exc.strerror or exc}") from exc


def _init_logger(ctx, sdk, params):
    try:
        init_logger(params["file"])
    except LoggerConfigError as exc:
        raise ExecutionError(str(exc)) from exc
    return Message(f"Logger has been initialized according to the config file: \"{params['file']}\"")


def _load_plugin(ctx, sdk, params):
    return Notice("Plugins are not supported anymore; the command does nothing.")


def register(registry: CommandRegistry) -> None:
    def _help(ctx, sdk, params):
        group = params.get("group")
        command = params.get("command")
        if command is not None:
            return command_help(registry.lookup(group, command))
        if group is not None:
            return group_help(registry, registry.group(group))
        return general_help(registry)

    registry.register(
        CommandSpec(
            None,
            HELP,
            "Print help",
            params=(
                ParamSpec("group", "Group to describe", main=True),
                ParamSpec("command", "Command of the group to describe"),
            ),
            examples=("help", "help wallet", "wallet help", "wallet create help"),
            handler=_help,
        )
    )
    registry.register(CommandSpec(None, "about", "Show about information", handler=_about))
    registry.register(CommandSpec(None, "exit", "Exit the shell", handler=_exit))
    registry.register(
        CommandSpec(
            None,
            "prompt",
            "Change command prompt",
            params=(ParamSpec("prompt", "New prompt string", main=True, required=True),),
            examples=("prompt new-prompt",),
            handler=_prompt,
        )
    )
    registry.register(
        CommandSpec(
            None,
            "show",
            "Print the content of text file",
            params=(ParamSpec("file", "The path to file to show", main=True, required=True),),
            examples=("show /home/file.txt",),
            handler=_show,
        )
    )
    registry.register(
        CommandSpec(
            None,
            "init-logger",
            "Init logger according to a config file",
            params=(
                ParamSpec("file", "The path to the logger config file", main=True, required=True),
            ),
            details=(
                "A .json file is applied as a logging dictConfig document; "
                "any other file is read with logging.config.fileConfig."
            ),
            examples=("init-logger /home/logger.json",),
            handler=_init_logger,
        )
    )
    registry.register(
        CommandSpec(
            None,
            "load-plugin",
            "Load plugin (deprecated, does nothing)",
            params=(
                ParamSpec("library", "Name of plugin (can be absolute or relative path)"),
                ParamSpec("initializer", "Name of plugin init function"),
            ),
            examples=("load-plugin library=libplugin initializer=init",),
            handler=_load_plugin,
        )
    )
