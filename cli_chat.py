"""CLI interface for the Policy Bot."""

import asyncio
import sys

from policy_bot.chat.service import PolicyBotService, create_policy_bot_service
from policy_bot.errors import PolicyBotError
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

sys.stdout.reconfigure(line_buffering=True) if hasattr(
    sys.stdout, "reconfigure"
) else None

EXIT_COMMANDS = {"exit", "quit"}


def print_banner():
    """Print welcome banner."""
    print("\n" + "=" * 70)
    print("Policy Bot - CLI Interface")
    print("=" * 70)
    print("Ask a question about company policies.")
    print("Type 'exit' to end the conversation.\n")


async def chat_loop(service: PolicyBotService) -> None:
    """Read questions from stdin until 'exit' and print the answers."""
    while True:
        question = (await asyncio.to_thread(input, "You: ")).strip()

        if not question:
            continue

        if question.lower() in EXIT_COMMANDS:
            print("\nGoodbye!\n")
            return

        logger.debug("Processing question through the answer pipeline...")
        answer = await service.pipeline.answer(question)
        print(f"\nBot: {answer}\n")


async def run_cli_chat() -> int:
    """Run the CLI chat interface."""
    print_banner()

    try:
        logger.info("Loading and indexing policy documents...")
        service = await create_policy_bot_service()
    except PolicyBotError as e:
        logger.error(f"Initialization failed: {e}")
        print(f"\nFailed to start the policy bot: {e}")
        return 1

    print("Policy Bot is ready. Ask a question or type 'exit' to quit.\n")

    try:
        await chat_loop(service)
    except EOFError:
        print("\n\nConversation interrupted. Goodbye!\n")
    except PolicyBotError as e:
        logger.error(f"Unrecoverable error: {e}", exc_info=True)
        print(f"\nFatal error: {e}")
        return 1

    return 0


def main() -> int:
    try:
        return asyncio.run(run_cli_chat())
    except KeyboardInterrupt:
        print("\n\nConversation interrupted. Goodbye!\n")
        return 0


if __name__ == "__main__":
    sys.exit(main())
