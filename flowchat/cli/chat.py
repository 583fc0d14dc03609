import argparse
import asyncio
import logging
import sys
from collections.abc import Callable

import httpx

from flowchat.core.settings import AppSettings, get_settings
from flowchat.providers.langflow import FlowConfigurationError, FlowError, LangflowClient
from flowchat.services.chat_session import ChatSession, EmptyPromptError

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"/exit", "/quit"}


async def run_once(session: ChatSession, prompt: str) -> str:
    return await session.send(prompt)


async def run_repl(
    session: ChatSession,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], object] = print,
) -> int:
    write(f"session {session.session_id} (type /exit to quit)")
    while True:
        try:
            line = await asyncio.to_thread(read_line, "you> ")
        except EOFError:
            return 0
        if line.strip() in EXIT_COMMANDS:
            return 0
        try:
            reply = await session.send(line)
        except EmptyPromptError:
            continue
        except FlowConfigurationError:
            raise
        except (FlowError, httpx.TransportError) as exc:
            logger.warning("Chat turn failed: %s", exc)
            write(f"error: {exc}")
            continue
        write(f"assistant> {reply}")


async def chat(settings: AppSettings, session_id: str | None, once: str | None) -> int:
    async with httpx.AsyncClient(timeout=settings.request_timeout_sec) as http_client:
        client = LangflowClient(settings, http_client)
        session = ChatSession(client, session_id=session_id)
        if once is not None:
            print(await run_once(session, once))
            return 0
        return await run_repl(session)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chat with a Langflow flow from the terminal.")
    parser.add_argument(
        "--session-id",
        default=None,
        help="Session id passed to Langflow (default: a fresh UUID).",
    )
    parser.add_argument(
        "--once",
        metavar="PROMPT",
        default=None,
        help="Send a single prompt, print the reply and exit.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    args = parse_args(argv)
    try:
        return asyncio.run(chat(get_settings(), args.session_id, args.once))
    except (FlowError, EmptyPromptError, httpx.TransportError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
