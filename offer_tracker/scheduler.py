# offer_tracker/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from .utils import logger

JOB_ID = "poll_trackers"

class PollScheduler:
    """Runs `Poller.run_cycle` every `interval_seconds` on a background thread."""

    def __init__(self, poller, interval_seconds: int = 30):
        self.poller = poller
        self.interval_seconds = interval_seconds
        self._scheduler = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self):
        if self.running:
            return
        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self._tick,
            'interval',
            seconds=self.interval_seconds,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info("Scheduler started, polling every %s seconds", self.interval_seconds)

    def _tick(self):
        try:
            self.poller.run_cycle()
        except Exception as e:
            logger.exception("Polling cycle failed: %s", e)

    def stop(self, wait: bool = False):
        if not self.running:
            return
        self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("Scheduler stopped")
