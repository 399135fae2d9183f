"""Interactive terminal loop for DevTask."""

import asyncio
import logging
import os

from devtask.engine.agent import DevTaskAgent
from devtask.utils.logging import setup_logging

PROMPT = "Você: "
EXIT_WORDS = {"sair", "exit"}
GREETING = "🤖 DevTask pronto. Digite \"ajuda\" para ver o que posso fazer ou \"sair\" para encerrar."
FAREWELL = "👋 Até a próxima!"


async def run_loop(agent: DevTaskAgent) -> None:
    print(GREETING)
    while True:
        try:
            message = await asyncio.to_thread(input, PROMPT)
        except (EOFError, KeyboardInterrupt):
            break

        message = message.strip()
        if not message:
            continue
        if message.lower() in EXIT_WORDS:
            break

        # One turn at a time: the next prompt waits for this response
        response = await agent.process_message(message)
        print(f"\n{response}\n")

    print(FAREWELL)


def main() -> None:
    if not os.getenv("DEVTASK_LOG_LEVEL"):
        setup_logging(logging.WARNING)
    asyncio.run(run_loop(DevTaskAgent()))


if __name__ == "__main__":
    main()
