"""Console entrypoint for toolchat.

Asks the model one question, letting it call the registered demo tools, and
prints the final answer. Also lists the tools or invokes one directly.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from toolchat import __version__
from toolchat.config import LogLevel, Settings, TransportKind, load_settings
from toolchat.conversation import ConversationLoop, NoResultError
from toolchat.logging import configure_base_logging, configure_run_logger, generate_run_id
from toolchat.openai_client.types import ApiError, UnexpectedMessageError
from toolchat.schema.wire import to_wire
from toolchat.tools import build_registry
from toolchat.tools.registry import ToolInvocationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolchat",
        description="Ask an OpenAI chat model a question it may answer by calling tools",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument("--debug", action="store_true", help="Log INFO and above to stderr.")
    parser.add_argument("--model", help="Override default model id")
    parser.add_argument("--max-iterations", type=int, dest="max_iterations", help="Tool-call rounds before giving up")
    parser.add_argument(
        "--transport",
        choices=[e.value for e in TransportKind],
        help="Use the openai SDK or plain httpx",
    )
    parser.add_argument(
        "--log-level",
        choices=[e.value for e in LogLevel],
        dest="log_level",
        help="Log level override",
    )
    parser.add_argument("--config-path", dest="config_path", help="Path to config.toml")
    parser.add_argument("--env-file", dest="env_file", help="Path to a .env file (default: nearest .env)")
    parser.add_argument("--list-tools", action="store_true", dest="list_tools", help="Print tool definitions as JSON")
    parser.add_argument("--call", metavar="TOOL", help="Invoke a single tool instead of asking the model")
    parser.add_argument("--args", dest="call_args", default="{}", help="JSON arguments for --call")
    parser.add_argument("text", nargs="?", help="Question for the model")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv(args.env_file or find_dotenv(usecwd=True))

    try:
        settings = load_settings(
            cli_overrides=_collect_overrides(args), config_path=args.config_path, create_if_missing=True
        )
    except ValidationError as exc:
        print(f"error: invalid configuration: {exc}")
        return 1

    configure_base_logging(debug_enabled=args.debug, toolchat_level=settings.log_level)

    if args.list_tools:
        return _run_list_tools()
    if args.call:
        return asyncio.run(_run_call(args.call, args.call_args))

    if not args.text or not args.text.strip():
        parser.error("a question is required")
    if not settings.api_key:
        print("error: OPENAI_API_KEY not set")
        return 1
    return asyncio.run(_run_query(settings, args.text))


async def _run_query(settings: Settings, text: str) -> int:
    run_id = generate_run_id()
    logger = configure_run_logger(run_id, log_level=settings.log_level)
    logger.info("run started: %s model=%s", run_id, settings.model)

    loop = ConversationLoop.from_settings(settings, build_registry(logger=logger), logger=logger)
    try:
        answer = await loop.query(text)
    except (ApiError, UnexpectedMessageError, ToolInvocationError, NoResultError) as exc:
        logger.error("run failed in state %s: %s", loop.state.value, exc)
        print(f"error: {exc}")
        return 1
    finally:
        aclose = getattr(loop.client.transport, "aclose", None)
        if callable(aclose):
            await aclose()

    print(answer)
    return 0


async def _run_call(name: str, raw_args: str) -> int:
    registry = build_registry()
    try:
        result = await registry.invoke(name, raw_args)
    except ToolInvocationError as exc:
        print(f"error: {exc}")
        return 1
    print(result)
    return 0


def _run_list_tools() -> int:
    registry = build_registry()
    rows = [
        {"name": tool.name, "description": tool.description, "parameters": to_wire(tool.parameters)}
        for tool in registry.definitions()
    ]
    print(json.dumps(rows, indent=2, ensure_ascii=False))
    return 0


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "model": args.model,
        "max_iterations": args.max_iterations,
        "transport": args.transport,
        "log_level": args.log_level,
    }


if __name__ == "__main__":
    sys.exit(main())
