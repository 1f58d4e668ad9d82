# harvester/scheduler.py
import os
from apscheduler.schedulers.background import BackgroundScheduler
from .crawl import CrawlConfig, Crawler
from .utils import logger

CRAWL_FROM = int(os.getenv("CRAWL_FROM", "0"))
CRAWL_TO = int(os.getenv("CRAWL_TO", "2"))
CRAWL_INTERVAL_MINUTES = int(os.getenv("CRAWL_INTERVAL_MINUTES", "60"))

scheduler = BackgroundScheduler()


def scheduled_crawl():
    crawler = Crawler(CrawlConfig.from_env())
    try:
        crawler.crawl(CRAWL_FROM, CRAWL_TO)
    finally:
        crawler.close()


def start_scheduler():
    scheduler.add_job(scheduled_crawl, "interval", minutes=CRAWL_INTERVAL_MINUTES,
                      id="catalog-crawl", replace_existing=True, max_instances=1)
    scheduler.start()
    logger.info("Scheduler started, crawling pages %d-%d every %d min",
                CRAWL_FROM, CRAWL_TO, CRAWL_INTERVAL_MINUTES)
