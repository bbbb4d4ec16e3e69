import logging
import signal
import threading
from typing import Callable, List, Optional

from shard_rebalancer.controller import RebalanceController
from shard_rebalancer.model import PassReport

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Run rebalancing passes back to back, waiting `poll_interval` seconds in between.

    Passes never overlap. The loop stops when `cancel` is set, which is checked
    before each pass and while waiting, or after `max_passes` passes.
    """

    def __init__(
        self,
        controller: RebalanceController,
        poll_interval: Optional[float] = None,
        max_passes: Optional[int] = None,
        on_report: Optional[Callable[[PassReport], None]] = None,
    ):
        self.controller = controller
        self.poll_interval = controller.settings.poll_interval if poll_interval is None else poll_interval
        self.max_passes = max_passes
        self.on_report = on_report
        self.passes = 0

    @property
    def cancel(self) -> threading.Event:
        return self.controller.cancel

    def stop(self):
        self.cancel.set()

    def run(self) -> List[PassReport]:
        logger.info(f"Starting rebalancer, running every {self.poll_interval}s")
        reports: List[PassReport] = []
        while not self.cancel.is_set() and not self.exhausted:
            report = self.run_once()
            if report is not None:
                reports.append(report)
            if self.exhausted or self.cancel.wait(self.poll_interval):
                break
        logger.info(f"Rebalancer stopped after {self.passes} passes")
        return reports

    @property
    def exhausted(self) -> bool:
        return self.max_passes is not None and self.passes >= self.max_passes

    def run_once(self) -> Optional[PassReport]:
        self.passes += 1
        try:
            report = self.controller.run_pass()
        except Exception:
            logger.exception("Rebalancing pass failed")
            return None
        outcome = report.outcome.value if report.outcome else "unknown"
        if report.succeeded:
            logger.info(f"Rebalancing pass finished: {outcome}")
        else:
            logger.warning(f"Rebalancing pass did not succeed: outcome={outcome}, errors={report.errors}")
        if self.on_report is not None:
            try:
                self.on_report(report)
            except Exception:
                logger.exception("Reporting the rebalancing pass failed")
        return report

    def install_signal_handlers(self):
        """Stop the loop cleanly on SIGINT and SIGTERM"""

        def handler(signum, frame):
            logger.info(f"Received signal {signal.Signals(signum).name}, stopping after the current step")
            self.stop()

        signal.signal(signal.SIGINT, handler)
        signal.signal(signal.SIGTERM, handler)
