# checksum.py
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable, Dict


HASHERS: Dict[str, Callable] = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


def _hash_file_contents(path: Path, algorithm: str) -> str:
    h = HASHERS[algorithm]()
    with path.open("rb") as f:
        while True:
            chunk = f.read(1024 * 1024)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def compute_shasum(file: str | Path, algorithm: str) -> Path:
    """
    Write `<file>.<algorithm>` next to the file, in the usual
    `sha256sum` layout: "<hexdigest>  <basename>".

    Returns the path of the written checksum file.
    """
    if algorithm not in HASHERS:
        raise ValueError(f"invalid shasum algorithm: {algorithm}")

    src = Path(file)
    try:
        digest = _hash_file_contents(src, algorithm)
    except OSError as e:
        raise OSError(f"failed to compute shasum for {src}: {e}") from e

    out = src.with_name(f"{src.name}.{algorithm}")
    out.write_text(f"{digest}  {src.name}", encoding="utf-8")
    return out
