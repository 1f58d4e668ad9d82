import argparse
import time
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

from harvester import crud  # noqa: E402
from harvester.crawl import CrawlConfig, Crawler  # noqa: E402
from harvester.db import DATABASE_URL, init_db, make_engine, make_session_factory  # noqa: E402
from harvester.errors import ConfigError  # noqa: E402
from harvester.utils import logger  # noqa: E402


def parse_args(argv=None):
    defaults = CrawlConfig.from_env()
    parser = argparse.ArgumentParser(description="Crawl catalog pages into the local store.")
    parser.add_argument("--from", dest="from_page", type=int, default=0, help="first page (0-based)")
    parser.add_argument("--to", dest="to_page", type=int, default=2, help="last page, inclusive")
    parser.add_argument("--workers", type=int, default=defaults.workers, help="parallel workers (1-20)")
    parser.add_argument("--timeout", type=float, default=defaults.timeout, help="per-request timeout in seconds")
    parser.add_argument("--db", default=None, help="SQLite file path (defaults to DATABASE_URL)")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    url = f"sqlite:///{args.db}" if args.db else DATABASE_URL
    engine = make_engine(url)
    # a store that cannot be initialized aborts the run
    init_db(engine)
    session_factory = make_session_factory(engine)

    config = CrawlConfig.from_env()
    config.workers = args.workers
    config.timeout = args.timeout
    try:
        crawler = Crawler(config, session_factory=session_factory)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    started = time.monotonic()
    try:
        summary = crawler.crawl(args.from_page, args.to_page)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    finally:
        crawler.close()

    logger.info("Total records: %d, saved: %d, workers: %d",
                summary.total_records, summary.persisted, summary.workers)
    for page, error in summary.errors.items():
        logger.info("Page %d failed: %s", page, error)

    with session_factory() as db:
        stats = crud.aggregate_stats(db)
    logger.info("Store: %d entries, %d stats samples", stats.total, stats.stats_records)
    for category, count in sorted(stats.categories.items()):
        logger.info("  %s: %d", category or "(none)", count)
    logger.info("Finished in %.1fs", time.monotonic() - started)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
