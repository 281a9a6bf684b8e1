# archive.py
from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Dict, Iterable


def create_zip_archive(dst: str | Path, files: Iterable[str | Path]) -> Path:
    """Zip each file into dst under its base name."""
    dst = Path(dst)
    tmp = dst.with_name(dst.name + ".tmp")
    try:
        with zipfile.ZipFile(tmp, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
            for f in files:
                src = Path(f)
                zf.write(src, arcname=src.name)
        tmp.replace(dst)
    finally:
        if tmp.exists():
            tmp.unlink(missing_ok=True)
    return dst


def create_tar_gz_archive(dst: str | Path, files: Iterable[str | Path]) -> Path:
    """Tar+gzip each file into dst under its base name."""
    dst = Path(dst)
    tmp = dst.with_name(dst.name + ".tmp")
    try:
        # Build in tmp, then atomic rename
        with tarfile.open(str(tmp), mode="w:gz") as tar:
            for f in files:
                src = Path(f)
                tar.add(str(src), arcname=src.name, recursive=False)
        tmp.replace(dst)
    finally:
        if tmp.exists():
            tmp.unlink(missing_ok=True)
    return dst


ARCHIVERS: Dict[str, Callable[..., Path]] = {
    "zip": create_zip_archive,
    "tar.gz": create_tar_gz_archive,
}


def archive_binary(binary: str | Path, fmt: str) -> Path:
    """
    Archive a single built binary to `<binary>.<fmt>` and remove the binary;
    the archive becomes the job's artifact.
    """
    if fmt not in ARCHIVERS:
        raise ValueError(f"invalid archive format: {fmt}")
    src = Path(binary)
    dst = src.with_name(f"{src.name}.{fmt}")
    ARCHIVERS[fmt](dst, [src])
    src.unlink()
    return dst
