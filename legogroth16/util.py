import logging
import os
import secrets
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

logger = logging.getLogger(__name__)


def isPowerOfTwo(n):
    # bit-arithmetic trick
    return n & (n-1) == 0


def nearestPowerOfTwo(n):
    if n <= 1: return 1
    if isPowerOfTwo(n): return n
    return 2 ** n.bit_length()


def default_rng():
    # Anything with a randrange(n) method works as a randomness source.
    return secrets.SystemRandom()


@contextmanager
def timer(label):
    """Log the wall-clock time spent in a block at DEBUG level."""
    start = time.perf_counter()
    logger.debug("Start: %s", label)
    try:
        yield
    finally:
        logger.debug("End: %s (%.3fs)", label, time.perf_counter() - start)


#| ## Worker threads
#| Multi-scalar multiplications are split into contiguous chunks that run
#| on a thread pool. Chunks share no mutable state and their results are
#| combined in chunk order.
NUM_THREADS = int(os.environ.get("LEGOGROTH16_NUM_THREADS", os.cpu_count() or 1))
MIN_CHUNK_SIZE = 64


def chunk_ranges(n, num_chunks, min_size=MIN_CHUNK_SIZE):
    size = max(min_size, -(-n // max(num_chunks, 1)))
    return [(start, min(start + size, n)) for start in range(0, n, size)]


def parallelize(f, n, num_threads=None):
    """Apply f(start, end) to chunks of range(n). Returns the results in chunk order."""
    num_threads = num_threads or NUM_THREADS
    ranges = chunk_ranges(n, num_threads)
    if num_threads == 1 or len(ranges) <= 1:
        return [f(start, end) for start, end in ranges]
    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        return list(executor.map(lambda r: f(*r), ranges))
