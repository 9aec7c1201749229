"""
File Identity Resolver - content digests, filesystem metadata, final record.

Digests are computed by streaming the file in fixed-size blocks so large
files are never held in memory.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from pathlib import Path

from fsmatcher.config import settings
from fsmatcher.errors import FileAccessError
from fsmatcher.models.report_models import MatchedRule, SensitiveFileInfo, SensitiveFileRecord

logger = logging.getLogger("fsmatcher.identity")

# POSIX st_blocks is always counted in 512-byte units
_STAT_BLOCK_SIZE = 512


def digest_file(file_path: str | os.PathLike[str], *algorithms: str) -> dict[str, str]:
    """Stream a file once and return {algorithm: hex digest}."""
    hashers = {name: hashlib.new(name) for name in algorithms}
    chunk_size = settings.hash_chunk_size
    with open(file_path, "rb") as f:
        while chunk := f.read(chunk_size):
            for hasher in hashers.values():
                hasher.update(chunk)
    return {name: hasher.hexdigest() for name, hasher in hashers.items()}


def sha256_file(file_path: str | os.PathLike[str]) -> str:
    return digest_file(file_path, "sha256")["sha256"]


def md5_file(file_path: str | os.PathLike[str]) -> str:
    return digest_file(file_path, "md5")["md5"]


def logical_size(file_path: str | os.PathLike[str]) -> int:
    """Logical file size in bytes, 0 when the file cannot be stat'ed."""
    try:
        return os.stat(file_path).st_size
    except OSError:
        return 0


def size_on_disk(stat_result: os.stat_result) -> int:
    """Allocated size; sparse and compressed files can differ from st_size."""
    blocks = getattr(stat_result, "st_blocks", None)
    if blocks is None:
        return stat_result.st_size
    return blocks * _STAT_BLOCK_SIZE


def unix_seconds(timestamp: float | None) -> int:
    """Whole Unix seconds; missing or pre-epoch timestamps become 0."""
    if timestamp is None or timestamp < 0:
        return 0
    return int(timestamp)


class FileIdentityResolver:
    """Assembles the SensitiveFileRecord for a file that matched."""

    def resolve(
        self,
        file_path: str | os.PathLike[str],
        desc: str,
        engine_result: str,
        file_type: str,
        matched_rules: list[MatchedRule],
    ) -> SensitiveFileRecord:
        """
        Build the record for a matched file.

        Raises:
            FileAccessError: metadata or content could not be read.
        """
        path = Path(file_path)
        try:
            stat_result = path.stat()
            digests = digest_file(path, "sha256", "md5")
        except OSError as e:
            raise FileAccessError(str(path), e) from e

        file_info = SensitiveFileInfo(
            file_name=path.name,
            file_type=file_type,
            file_size=size_on_disk(stat_result),
            file_path=str(path),
            file_sha256=digests["sha256"],
            file_md5=digests["md5"],
            # CPython exposes st_birthtime on macOS, BSD and Windows only; Linux reports 0
            create_time=unix_seconds(getattr(stat_result, "st_birthtime", None)),
            update_time=unix_seconds(stat_result.st_mtime),
            access_time=unix_seconds(stat_result.st_atime),
            desc=desc,
        )

        logger.debug(f"[Identity] {path} sha256={file_info.file_sha256}")

        return SensitiveFileRecord(
            file_info=file_info,
            file_securities=sorted(matched_rules, key=MatchedRule.sort_key),
            engine_result=engine_result,
            file_url="",
            found_time=int(time.time()),
        )
