"""Parallel file hashing.

Files are split into fixed-size batches and each batch is hashed by a
separate worker process. At most ``concurrency`` worker processes run at any
time. A batch whose worker fails contributes no digests; the call itself
still succeeds, so callers may receive a partial mapping.
"""

from __future__ import annotations

import json
import logging
import sys
import time
import warnings
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional

from artisync.core.exceptions import DroppedBatchWarning, validate_positive
from artisync.core.logging import log_context
from artisync.hashing.runner import ProcessResult, ProcessRunner, SubprocessRunner
from artisync.models.files import FileDescriptor
from artisync.models.progress import HashSummary

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_CONCURRENCY = 8
DEFAULT_CHUNK_SIZE = 50
DEFAULT_JOB_TIMEOUT = 300.0
DEFAULT_ALGORITHM = "md5"
WORKER_MODULE = "artisync.hashing.worker"


def split_into_batches(paths: Sequence[str], batch_size: int) -> list[list[str]]:
    """Split paths into consecutive batches of ``batch_size``.

    Order is preserved; the final batch may be smaller.
    """
    return [list(paths[i : i + batch_size]) for i in range(0, len(paths), batch_size)]


def parse_worker_output(output: str, requested: Sequence[str]) -> Optional[dict[str, str]]:
    """Decode a worker's stdout.

    Returns:
        The path-to-digest mapping restricted to ``requested`` paths, or None
        if the output is not a JSON object of strings.
    """
    try:
        data: Any = json.loads(output)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
        return None
    wanted = set(requested)
    return {path: digest.lower() for path, digest in data.items() if path in wanted}


class ParallelFileHasher:
    """Hash many files using a bounded number of worker processes."""

    def __init__(
        self,
        concurrency: int = DEFAULT_CONCURRENCY,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        *,
        job_timeout: Optional[float] = DEFAULT_JOB_TIMEOUT,
        strict: bool = False,
        algorithm: str = DEFAULT_ALGORITHM,
        runner: Optional[ProcessRunner] = None,
        python: str = sys.executable,
    ) -> None:
        """Initialize the hasher.

        Args:
            concurrency: Maximum worker processes alive at once.
            chunk_size: Paths handed to each worker.
            job_timeout: Seconds before a worker is killed and its batch
                dropped. None waits indefinitely.
            strict: Emit a DroppedBatchWarning for every dropped batch.
            algorithm: hashlib algorithm used when a call names none.
            runner: Process runner (defaults to subprocess).
            python: Interpreter used to launch workers.

        Raises:
            ValidationError: If concurrency or chunk_size is below 1.
        """
        self.concurrency = validate_positive(concurrency, "concurrency")
        self.chunk_size = validate_positive(chunk_size, "chunk_size")
        self.job_timeout = job_timeout
        self.strict = strict
        self.algorithm = algorithm
        self.runner: ProcessRunner = runner or SubprocessRunner()
        self.python = python
        self.last_summary = HashSummary()

    @classmethod
    def from_config(cls, config: Any, **kwargs: Any) -> ParallelFileHasher:
        """Build from a loaded :class:`artisync.core.config.Config`."""
        settings = config.hashing
        return cls(
            settings.concurrency,
            settings.chunk_size,
            job_timeout=settings.job_timeout,
            strict=settings.strict,
            algorithm=settings.algorithm,
            **kwargs,
        )

    # =========================================================================
    # Public API
    # =========================================================================

    def hash_files(
        self,
        paths: Sequence[str],
        algorithm: Optional[str] = None,
    ) -> dict[str, str]:
        """Hash files in parallel.

        Args:
            paths: File paths to hash.
            algorithm: hashlib algorithm name (md5, sha256, ...). Defaults to
                the hasher's ``algorithm``.

        Returns:
            Mapping of path to lowercase hex digest. Paths that were missing,
            unreadable, or in a failed batch are absent.
        """
        algorithm = algorithm or self.algorithm
        # each distinct path goes to exactly one worker
        paths = list(dict.fromkeys(paths))
        if not paths:
            self.last_summary = HashSummary(algorithm=algorithm)
            return {}

        batches = split_into_batches(paths, self.chunk_size)
        results: dict[str, str] = {}
        dropped: list[tuple[int, str]] = []
        started = time.monotonic()

        with log_context(
            "hash_files", logger, files=len(paths), batches=len(batches), algorithm=algorithm
        ):
            workers = min(self.concurrency, len(batches))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hash-job") as pool:
                futures: list[Future[dict[str, str] | str]] = [
                    pool.submit(self._run_batch, batch, algorithm) for batch in batches
                ]
                # merge in batch order so results do not depend on scheduling
                for index, future in enumerate(futures):
                    outcome = future.result()
                    if isinstance(outcome, dict):
                        results.update(outcome)
                    else:
                        dropped.append((index, outcome))

        for index, reason in dropped:
            self._report_dropped(index, len(batches[index]), reason)

        self.last_summary = HashSummary(
            total=len(paths),
            succeeded=len(results),
            failed=len(paths) - len(results),
            duration=time.monotonic() - started,
            errors=[f"batch {index + 1}: {reason}" for index, reason in dropped],
            batches=len(batches),
            batches_dropped=len(dropped),
            algorithm=algorithm,
        )
        return results

    def hash_files_with_metadata(
        self,
        files: Sequence[FileDescriptor],
        algorithm: Optional[str] = None,
    ) -> list[FileDescriptor]:
        """Hash descriptors' ``real_path`` and attach the digests.

        Returns:
            New descriptors in input order, each with ``hash`` set to its
            digest or to "" when it could not be hashed.
        """
        if not files:
            self.last_summary = HashSummary(algorithm=algorithm or self.algorithm)
            return []

        hashes = self.hash_files([f.real_path for f in files], algorithm)
        return [f.with_hash(hashes.get(f.real_path, "")) for f in files]

    # =========================================================================
    # Worker Jobs
    # =========================================================================

    def worker_command(self) -> list[str]:
        return [self.python, "-m", WORKER_MODULE]

    def _run_batch(self, batch: list[str], algorithm: str) -> dict[str, str] | str:
        """Run one worker job; returns its digests or a failure reason."""
        payload = json.dumps({"paths": batch, "algorithm": algorithm})
        try:
            result = self.runner.run(
                self.worker_command(),
                input=payload,
                timeout=self.job_timeout,
            )
        except Exception as e:
            return f"runner raised {type(e).__name__}: {e}"

        failure = self._failure_reason(result)
        if failure:
            return failure

        parsed = parse_worker_output(result.stdout, batch)
        if parsed is None:
            return "worker output is not a path-to-digest mapping"
        return parsed

    def _failure_reason(self, result: ProcessResult) -> str:
        if result.ok:
            return ""
        if result.timed_out:
            return f"worker timed out after {self.job_timeout}s"
        detail = result.stderr.strip().splitlines()[-1:] or [""]
        return f"worker exited with status {result.returncode} {detail[0]}".rstrip()

    def _report_dropped(self, index: int, size: int, reason: str) -> None:
        message = f"Hash batch {index + 1} ({size} files) dropped: {reason}"
        if self.strict:
            logger.warning(message)
            warnings.warn(message, DroppedBatchWarning, stacklevel=3)
        else:
            logger.debug(message)
