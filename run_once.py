"""Run a single polling cycle against the configured store and exit.

For cron-style deployments that do not keep the API process running.
"""
from dotenv import load_dotenv

load_dotenv()

from offer_tracker.config import Settings
from offer_tracker.main import build_components
from offer_tracker.utils import logger


def main() -> int:
    settings = Settings.from_env()
    components = build_components(settings)
    components.store.load()
    found = components.poller.run_cycle()
    logger.info("Cycle finished with %d new product(s)", found)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
