"""Hash worker job.

Runs in its own interpreter (``python -m artisync.hashing.worker``). Reads
``{"paths": [...], "algorithm": "..."}`` as JSON on stdin and prints a JSON
object mapping each readable path to its lowercase hex digest. Paths that do
not exist or cannot be read are left out.
"""

from __future__ import annotations

import hashlib
import json
import os
import sys
from collections.abc import Iterable
from typing import Any

READ_BLOCK_SIZE = 1024 * 1024

EXIT_OK = 0
EXIT_BAD_PAYLOAD = 2
EXIT_BAD_ALGORITHM = 3


def file_digest(path: str, algorithm: str) -> str:
    """Digest a file's bytes, reading it in blocks."""
    digest = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(READ_BLOCK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def hash_paths(paths: Iterable[str], algorithm: str) -> dict[str, str]:
    """Hash every readable regular file in ``paths``.

    Args:
        paths: Absolute file paths.
        algorithm: Any name accepted by :func:`hashlib.new`.

    Returns:
        Mapping of path to digest. Unreadable paths are omitted and duplicates
        are hashed once.

    Raises:
        ValueError: If ``algorithm`` is not supported.
    """
    hashlib.new(algorithm)

    results: dict[str, str] = {}
    for path in paths:
        if path in results:
            continue
        if not os.path.isfile(path) or not os.access(path, os.R_OK):
            continue
        try:
            results[path] = file_digest(path, algorithm)
        except OSError:
            # vanished or became unreadable after the access check
            continue
    return results


def _parse_payload(raw: str) -> tuple[list[str], str]:
    payload: Any = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("payload must be a JSON object")
    paths = payload.get("paths")
    algorithm = payload.get("algorithm", "md5")
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise ValueError("'paths' must be a list of strings")
    if not isinstance(algorithm, str):
        raise ValueError("'algorithm' must be a string")
    return paths, algorithm


def main() -> int:
    try:
        paths, algorithm = _parse_payload(sys.stdin.read())
    except ValueError as e:
        print(f"invalid payload: {e}", file=sys.stderr)
        return EXIT_BAD_PAYLOAD

    try:
        results = hash_paths(paths, algorithm)
    except ValueError as e:
        print(f"unsupported algorithm {algorithm!r}: {e}", file=sys.stderr)
        return EXIT_BAD_ALGORITHM

    sys.stdout.write(json.dumps(results))
    sys.stdout.flush()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
