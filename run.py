#!/usr/bin/env python3
"""
Bank Ledger Entry Point

Loads the last saved bank (or seeds a fresh one), serves the API with
uvicorn, and saves a snapshot when the server stops.
"""

import sys

from bank_ledger.api import create_app, run_server
from bank_ledger.bank import Bank
from bank_ledger.config import get_settings
from bank_ledger.logging_config import setup_logging
from bank_ledger.persistence import BankSnapshotStore
from bank_ledger.seed import seed_demo_data
from bank_ledger.storage import create_storage


def main() -> int:
    settings = get_settings()
    logger = setup_logging(settings.log_level, log_format=settings.log_format)

    storage = create_storage(settings.storage_backend, settings.sqlite_path)
    store = BankSnapshotStore(storage)

    bank = store.load()
    if bank is None:
        bank = Bank(settings.bank_name)
        if settings.seed_demo_data:
            seed_demo_data(bank)

    try:
        run_server(create_app(bank), host=settings.api_host, port=settings.api_port)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        return 1
    finally:
        store.save(bank)
        storage.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
