from __future__ import annotations

import asyncio
import logging
import sys

from .config import load_settings
from .formatting import format_report, short_address
from .service import ScannerService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _log_progress(index: int, total: int, address: str) -> None:
    logger.info("Processed %d/%d %s", index, total, short_address(address))


async def _main(addresses: list[str]) -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    addresses = addresses or list(settings.addresses)
    if not addresses:
        raise SystemExit("No addresses given (pass them as arguments or set ADDRESSES)")

    service = ScannerService(settings)
    try:
        results = await service.run_batch(addresses, on_progress=_log_progress)
        total = service.summarize(results)
        logger.info("Report\n%s", format_report(results, total, settings.chain_id))
    finally:
        await service.close()


def main() -> None:
    try:
        asyncio.run(_main(sys.argv[1:]))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
