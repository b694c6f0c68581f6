# pipeline.py - pipecutter ver1.0
#
# Producer / solver / writer threads around the optimizer:
#   producer  -> LatestValueChannel -> solver -> queue.Queue -> writer
# A job with path=None travels through both stages as end of input.

import logging
import queue
import threading
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from io_utils import DEFAULT_OUTPUT_PREFIX, FileAccessError, OrderJob, read_order_job
from models import Catalog, Solution
from optimizer import MinOffcutOptimizer
from text_export import write_result

logger = logging.getLogger(__name__)

Result = Tuple[OrderJob, Optional[Solution]]


# -------------------------------------------------------------
# Single slot handoff
# -------------------------------------------------------------

class LatestValueChannel:
    """
    Capacity-one channel. put() replaces an untaken value and wakes one
    waiting taker; take() blocks until a value is present.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._value = None
        self._full = False

    def put(self, value) -> None:
        if value is None:
            raise ValueError("Channel values cannot be None.")
        with self._cond:
            self._value = value
            self._full = True
            self._cond.notify()

    def take(self):
        with self._cond:
            while not self._full:
                self._cond.wait()
            self._full = False
            value, self._value = self._value, None
            return value

    def empty(self) -> bool:
        with self._cond:
            return not self._full


# -------------------------------------------------------------
# Workers
# -------------------------------------------------------------

class OrderProducer(threading.Thread):
    """
    Reads every input once, then keeps offering the jobs that are not done
    yet (the channel may have dropped them) until all are done.
    """

    def __init__(self, paths: Sequence[str], channel: LatestValueChannel,
                 is_done: Callable[[str], bool], poll_interval: float = 0.01):
        super().__init__(name="order-producer", daemon=True)
        self.paths = list(paths)
        self.channel = channel
        self.is_done = is_done
        self.poll_interval = poll_interval
        self._idle = threading.Event()

    def read(self, path: str) -> OrderJob:
        logger.info("Reading file \"%s\"", path)
        try:
            job = read_order_job(path)
        except FileAccessError as e:
            logger.error("%s", e)
            return OrderJob(path=path, error=str(e))
        if job.error:
            logger.warning("Order file \"%s\" rejected: %s", path, job.error)
        return job

    def run(self) -> None:
        try:
            jobs: Dict[str, OrderJob] = {p: self.read(p) for p in self.paths}
            pending = list(self.paths)
            while pending:
                for p in pending:
                    self.channel.put(jobs[p])
                self._idle.wait(self.poll_interval)
                pending = [p for p in pending if not self.is_done(p)]
        finally:
            # downstream threads only stop on this
            self.channel.put(OrderJob.end_of_input())


class SolverWorker(threading.Thread):
    """Solves each input at most once per run and forwards (job, solution)."""

    def __init__(self, channel: LatestValueChannel, results: "queue.Queue[Result]",
                 optimizer: MinOffcutOptimizer):
        super().__init__(name="solver", daemon=True)
        self.channel = channel
        self.results = results
        self.optimizer = optimizer
        self.processed: Set[str] = set()

    def run(self) -> None:
        while True:
            job: OrderJob = self.channel.take()
            if job.is_end:
                self.results.put((job, None))
                break
            if job.path in self.processed:
                continue
            self.processed.add(job.path)

            self.results.put(self.solve(job))

    def solve(self, job: OrderJob) -> Result:
        if job.order is None:
            return job, None
        try:
            return job, self.optimizer.solve(job.order)
        except Exception as e:
            logger.exception("Optimization of \"%s\" failed", job.path)
            return OrderJob(path=job.path, error=f"Optimization failed: {e!r}"), None


class ResultWriter(threading.Thread):
    """Writes sidecar files and records every result until end of input."""

    def __init__(self, results: "queue.Queue[Result]", prefix: str = DEFAULT_OUTPUT_PREFIX):
        super().__init__(name="result-writer", daemon=True)
        self.results = results
        self.prefix = prefix
        self.written: List[Result] = []
        self._done: Set[str] = set()
        self._lock = threading.Lock()

    def is_done(self, path: str) -> bool:
        with self._lock:
            return path in self._done

    def write(self, job: OrderJob, solution: Optional[Solution]) -> None:
        try:
            target = write_result(job, solution, self.prefix)
            logger.info("Writing result to file \"%s\"", target)
        except OSError as e:
            logger.error("Could not write output for \"%s\": %s", job.path, e)

    def run(self) -> None:
        while True:
            job, solution = self.results.get()
            if job.is_end:
                break
            try:
                self.write(job, solution)
            finally:
                with self._lock:
                    self.written.append((job, solution))
                    self._done.add(job.path)


# -------------------------------------------------------------
# Wiring
# -------------------------------------------------------------

def run_pipeline(paths: Sequence[str], catalog: Optional[Catalog] = None,
                 prefix: str = DEFAULT_OUTPUT_PREFIX) -> List[Result]:
    """
    Solves every order file in `paths` and writes its sidecar file.
    Blocks until the writer has drained; returns results in write order.
    """
    channel = LatestValueChannel()
    results: "queue.Queue[Result]" = queue.Queue()

    writer = ResultWriter(results, prefix)
    solver = SolverWorker(channel, results, MinOffcutOptimizer(catalog))
    producer = OrderProducer(paths, channel, writer.is_done)

    writer.start()
    solver.start()
    producer.start()

    producer.join()
    solver.join()
    writer.join()
    return list(writer.written)
