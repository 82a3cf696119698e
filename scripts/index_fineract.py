import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from fineract_rag.config import Settings
from fineract_rag.core.logging import configure_logging
from fineract_rag.services import build_services


async def main() -> int:
    # Settings must be read after load_dotenv so .env values apply
    cfg = Settings()
    configure_logging(cfg.log_level)

    print("Initializing services...")
    services = build_services(cfg)
    await services.store.create_all(services.engine)

    try:
        print(f"Indexing from {cfg.fineract_base_url} ...")
        report = await services.indexer.index_now()

        for category, cat in report.categories.items():
            status = f"error: {cat.error}" if cat.error else "ok"
            print(
                f"  {category}: indexed={cat.indexed} skipped={cat.skipped} "
                f"failed={cat.failed} ({status})"
            )

        stats = await services.store.get_stats()
        print(
            f"Done. {report.total_indexed} documents indexed this run; "
            f"{stats['total_documents']} in store "
            f"({stats['indexing_progress']:.1f}% embedded)."
        )
    finally:
        await services.shutdown()

    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
