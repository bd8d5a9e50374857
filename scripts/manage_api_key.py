"""Show or rotate the webhook API key.

    python scripts/manage_api_key.py show     # prints the key, creating one if none exists
    python scripts/manage_api_key.py rotate   # replaces the key; senders must be updated
"""

import argparse
import asyncio

from tracking_receiver.core.config import get_settings
from tracking_receiver.db import create_engine, create_session_factory, create_tables
from tracking_receiver.services.credential_store import CredentialStore


async def main(action: str) -> None:
    settings = get_settings()
    engine = create_engine(settings.database_url, echo=False)
    try:
        if settings.create_tables_on_startup:
            await create_tables(engine)
        store = CredentialStore(create_session_factory(engine), key_length=settings.api_key_length)

        if action == "rotate":
            key = await store.rotate_key()
            print("API key regenerated. Update it in every webhook sender.")
        else:
            key = await store.get_or_create_key()

        print(f"API key: {key}")
        print(f"Send it as the {settings.api_key_header} header or the {settings.api_key_param} parameter.")
        print(f"Webhook URL path: {settings.api_prefix}/orders")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("action", choices=["show", "rotate"], nargs="?", default="show")
    args = parser.parse_args()
    asyncio.run(main(args.action))
