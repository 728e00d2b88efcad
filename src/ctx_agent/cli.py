from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from ctx_agent.config.settings import Settings, get_settings
from ctx_agent.config.user_config import UserConfigStore
from ctx_agent.conversation.factory import build_handler
from ctx_agent.conversation.handler import ConversationHandler
from ctx_agent.tools import build_registry

CLI_CONVERSATION_ID = "cli"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ctx-agent",
        description="Capture tasks and notes from informal messages.",
    )
    parser.add_argument("--log-level", default=None, help="Override CTX_AGENT_LOG_LEVEL.")
    commands = parser.add_subparsers(dest="command", required=True)

    ask = commands.add_parser("ask", help="Run one message through the agent.")
    ask.add_argument("message", nargs="+", help="Message text, as you would text it.")

    commands.add_parser("chat", help="Interactive session; yes/no confirmations carry over.")

    commands.add_parser("tools", help="List the tools the agent may call.")

    config = commands.add_parser("config", help="Show or change ~/.ctx defaults.")
    config_commands = config.add_subparsers(dest="config_command", required=True)
    config_commands.add_parser("show", help="Print the stored defaults.")
    set_board = config_commands.add_parser("set-board", help="Store the default board id.")
    set_board.add_argument("board_id")
    set_inbox = config_commands.add_parser("set-inbox", help="Store the default inbox list id.")
    set_inbox.add_argument("list_id")
    set_vault = config_commands.add_parser("set-vault", help="Store the Obsidian vault path.")
    set_vault.add_argument("vault_path", type=Path)

    serve = commands.add_parser("serve", help="Start the Telegram webhook server.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)

    return parser.parse_args(argv)


def _run_config(args: argparse.Namespace, store: UserConfigStore) -> None:
    if args.config_command == "set-board":
        config = store.set_default_board(args.board_id)
    elif args.config_command == "set-inbox":
        config = store.set_default_inbox(args.list_id)
    elif args.config_command == "set-vault":
        config = store.set_vault_path(str(args.vault_path.expanduser().resolve()))
    else:
        config = store.load()
    print(json.dumps(config.model_dump(by_alias=True, exclude_none=True), indent=2))


def _run_chat(handler: ConversationHandler) -> None:
    while True:
        try:
            text = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not text:
            continue
        print(handler.handle(CLI_CONVERSATION_ID, text))


def _run_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    uvicorn.run(
        "ctx_agent.api.main:app",
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.command == "tools":
        for spec in build_registry().values():
            print(f"{spec.name}: {spec.description}")
    elif args.command == "config":
        _run_config(args, settings.user_config_store())
    elif args.command == "serve":
        _run_serve(args, settings)
    elif args.command == "chat":
        _run_chat(build_handler(settings))
    else:
        handler = build_handler(settings)
        print(handler.handle(CLI_CONVERSATION_ID, " ".join(args.message)))


if __name__ == "__main__":
    main()
