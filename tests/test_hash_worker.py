"""Tests for the hash worker job."""

from __future__ import annotations

import hashlib
import io
import json
from pathlib import Path

import pytest

from artisync.hashing import worker
from artisync.hashing.worker import file_digest, hash_paths


def _write(path: Path, data: bytes) -> str:
    path.write_bytes(data)
    return str(path)


class TestHashPaths:
    """Tests for hash_paths function."""

    def test_hashes_readable_files(self, temp_dir: Path):
        a = _write(temp_dir / "a.txt", b"alpha")
        b = _write(temp_dir / "b.txt", b"beta")

        results = hash_paths([a, b], "sha256")

        assert results == {
            a: hashlib.sha256(b"alpha").hexdigest(),
            b: hashlib.sha256(b"beta").hexdigest(),
        }

    def test_omits_missing_paths(self, temp_dir: Path):
        a = _write(temp_dir / "a.txt", b"alpha")

        results = hash_paths([a, str(temp_dir / "missing.txt")], "md5")

        assert list(results) == [a]

    def test_omits_directories(self, temp_dir: Path):
        results = hash_paths([str(temp_dir)], "md5")

        assert results == {}

    def test_duplicate_paths_hashed_once(self, temp_dir: Path):
        a = _write(temp_dir / "a.txt", b"alpha")

        results = hash_paths([a, a], "md5")

        assert results == {a: hashlib.md5(b"alpha").hexdigest()}

    def test_large_file_read_in_blocks(self, temp_dir: Path):
        data = b"x" * (worker.READ_BLOCK_SIZE * 2 + 17)
        big = _write(temp_dir / "big.bin", data)

        assert file_digest(big, "sha1") == hashlib.sha1(data).hexdigest()

    def test_unknown_algorithm_raises(self, temp_dir: Path):
        a = _write(temp_dir / "a.txt", b"alpha")

        with pytest.raises(ValueError):
            hash_paths([a], "not-a-digest")

    def test_empty_file(self, temp_dir: Path):
        empty = _write(temp_dir / "empty", b"")

        assert hash_paths([empty], "md5") == {empty: hashlib.md5(b"").hexdigest()}


class TestWorkerMain:
    """Tests for the worker process entry point."""

    def _run(self, monkeypatch: pytest.MonkeyPatch, payload: str) -> int:
        monkeypatch.setattr("sys.stdin", io.StringIO(payload))
        return worker.main()

    def test_prints_json_mapping(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ):
        a = _write(temp_dir / "a.txt", b"alpha")
        payload = json.dumps({"paths": [a, str(temp_dir / "nope")], "algorithm": "md5"})

        code = self._run(monkeypatch, payload)

        assert code == worker.EXIT_OK
        assert json.loads(capsys.readouterr().out) == {a: hashlib.md5(b"alpha").hexdigest()}

    def test_malformed_payload_exits_nonzero(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ):
        code = self._run(monkeypatch, "{not json")

        captured = capsys.readouterr()
        assert code == worker.EXIT_BAD_PAYLOAD
        assert captured.out == ""
        assert "invalid payload" in captured.err

    def test_paths_must_be_strings(self, monkeypatch: pytest.MonkeyPatch):
        code = self._run(monkeypatch, json.dumps({"paths": [1, 2], "algorithm": "md5"}))

        assert code == worker.EXIT_BAD_PAYLOAD

    def test_unknown_algorithm_exits_nonzero(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ):
        code = self._run(monkeypatch, json.dumps({"paths": [], "algorithm": "bogus"}))

        assert code == worker.EXIT_BAD_ALGORITHM
        assert "bogus" in capsys.readouterr().err
