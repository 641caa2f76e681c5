"""
Shared fixtures: zip builders, an in-memory object store and configuration.
"""

import base64
import hashlib
import os
import time
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import pytest

from ziprelay.models.config_models import (
    DestinationConfig,
    ProcessingConfig,
    RelayConfig,
    SourceConfig,
)


def make_zip(
    path: Path,
    entries: Union[Dict[str, Union[str, bytes]], Iterable[Tuple[str, Union[str, bytes]]]],
    directories: Iterable[str] = (),
    age_seconds: Optional[float] = None,
) -> Path:
    """Write a real zip file; ``entries`` may repeat names when given as pairs."""
    pairs = entries.items() if isinstance(entries, dict) else entries
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for directory in directories:
            archive.writestr(zipfile.ZipInfo(directory.rstrip("/") + "/"), b"")
        for name, content in pairs:
            data = content.encode("utf-8") if isinstance(content, str) else content
            archive.writestr(name, data)

    if age_seconds is not None:
        age(path, age_seconds)
    return path


def make_damaged_lzma_zip(path: Path, name: str = "doc.xml") -> Path:
    """
    Write a one-entry ZIP_LZMA archive whose LZMA properties are overwritten.

    The central directory stays intact, so the archive opens and the damage
    only surfaces when the entry is decompressed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_LZMA) as archive:
        archive.writestr(name, bytes(range(256)) * 8)
    with zipfile.ZipFile(path) as archive:
        offset = archive.getinfo(name).header_offset

    data = bytearray(path.read_bytes())
    name_length = int.from_bytes(data[offset + 26 : offset + 28], "little")
    extra_length = int.from_bytes(data[offset + 28 : offset + 30], "little")
    start = offset + 30 + name_length + extra_length
    # 4-byte zip LZMA header (version, properties size), then 5 property bytes
    data[start + 4 : start + 9] = b"\xff" * 5
    path.write_bytes(bytes(data))
    return path


def age(path: Path, seconds: float) -> None:
    """Backdate a file's modification time."""
    stamp = time.time() - seconds
    os.utime(path, (stamp, stamp))


class InMemoryObjectStore:
    """
    ObjectStore double keeping objects in a dict.

    Uploads fail for keys whose last segment is in ``failing_names`` (or for
    every key when ``fail_all`` is set). ``transient_failures`` makes the
    first N calls for a name fail before succeeding.
    """

    def __init__(
        self,
        failing_names: Iterable[str] = (),
        fail_all: bool = False,
        transient_failures: Optional[Dict[str, int]] = None,
    ):
        self.failing_names = set(failing_names)
        self.fail_all = fail_all
        self.transient_failures = dict(transient_failures or {})
        self.objects: Dict[str, Dict[str, object]] = {}
        self.calls: List[str] = []

    async def put_object(
        self, bucket: str, key: str, body: bytes, content_type: str, content_md5: str
    ) -> str:
        self.calls.append(key)
        name = key.rsplit("/", 1)[-1]

        if self.fail_all or name in self.failing_names:
            raise ConnectionError(f"injected failure for {key}")
        if self.transient_failures.get(name, 0) > 0:
            self.transient_failures[name] -= 1
            raise ConnectionError(f"transient failure for {key}")

        expected = base64.b64encode(hashlib.md5(body).digest()).decode("ascii")
        if content_md5 != expected:
            raise ValueError(f"Content-MD5 mismatch for {key}")

        self.objects[key] = {
            "bucket": bucket,
            "body": body,
            "content_type": content_type,
        }
        return f'"{hashlib.md5(body).hexdigest()}"'

    def names(self) -> List[str]:
        return sorted(key.rsplit("/", 1)[-1] for key in self.objects)

    def prefixes(self) -> List[str]:
        return sorted({key.rsplit("/", 1)[0] for key in self.objects})


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def relay_dirs(tmp_path: Path) -> Dict[str, Path]:
    dirs = {name: tmp_path / name for name in ("incoming", "archive", "failed")}
    dirs["incoming"].mkdir()
    return dirs


@pytest.fixture
def relay_config(relay_dirs: Dict[str, Path]) -> RelayConfig:
    return RelayConfig(
        source=SourceConfig(
            source_dir=relay_dirs["incoming"],
            archive_dir=relay_dirs["archive"],
            failed_dir=relay_dirs["failed"],
            min_file_age_ms=0,
        ),
        destination=DestinationConfig(bucket="test-bucket", prefix_base="landing"),
        processing=ProcessingConfig(
            timeout_buffer_ms=5000,
            upload_retry_attempts=1,
            retry_wait_seconds=0.0,
        ),
    )


@pytest.fixture
def zip_factory():
    return make_zip


@pytest.fixture
def store_factory():
    return InMemoryObjectStore


@pytest.fixture
def damaged_lzma_zip_factory():
    return make_damaged_lzma_zip
