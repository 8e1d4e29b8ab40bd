"""Parallel content hashing for artisync.

Digests are computed in isolated worker processes (``artisync.hashing.worker``)
launched by :class:`ParallelFileHasher`.
"""

from artisync.hashing.dispatcher import (
    DEFAULT_ALGORITHM,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONCURRENCY,
    DEFAULT_JOB_TIMEOUT,
    ParallelFileHasher,
    parse_worker_output,
    split_into_batches,
)
from artisync.hashing.runner import ProcessResult, ProcessRunner, SubprocessRunner
from artisync.hashing.worker import file_digest, hash_paths

__all__ = [
    # Constants
    "DEFAULT_ALGORITHM",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_JOB_TIMEOUT",
    # Dispatcher
    "ParallelFileHasher",
    "parse_worker_output",
    "split_into_batches",
    # Worker job
    "file_digest",
    "hash_paths",
    # Process runner
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
]
