import asyncio
import logging

from passwatch.app.db import init_models

if __name__ == "__main__":
    # DEV MODE ONLY: drops every table before re-creating it
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init_models(drop=True))
    print(">>> Tables Created Successfully!")
