"""Send a test message to the configured Telegram chat.

Usage:
    python -m scripts.send_test_message            # Default test text
    python -m scripts.send_test_message "Hello"    # Custom text
"""

import asyncio
import logging
import sys

from review_relay.config import get_settings
from review_relay.errors import ReviewRelayError
from review_relay.services.formatter import format_timestamp
from review_relay.services.telegram import TelegramClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


async def main() -> int:
    settings = get_settings()
    text = " ".join(sys.argv[1:]) or f"✅ Тестове повідомлення\n🕑 {format_timestamp()}"

    client = TelegramClient(settings)
    print(f"Sending to chat {settings.telegram_chat_id or '<unset>'}...")
    try:
        await client.send_message(text)
    except ReviewRelayError as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        await client.aclose()

    print("Sent.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
