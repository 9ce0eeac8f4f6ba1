"""Artifact packaging for zip-deploy.

- copy the build output into the site directory
- stamp the version into the site manifest
- zip the site directory into one archive

Archive members are written in sorted order so two runs over the same
tree produce the same member list.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from shipit.core.pipeline_errors import PackagingError
from shipit.core.result import Err, Ok, Result

__all__ = ["collect_files", "copy_build_output", "create_archive", "stamp_version"]


def copy_build_output(src: Path, dest: Path) -> Result[Path, PackagingError]:
    """Replace ``dest`` with a recursive copy of ``src``."""
    if not src.is_dir():
        return Err(PackagingError(path=src, reason="build output directory not found"))
    try:
        if dest.exists():
            shutil.rmtree(dest)
        shutil.copytree(src, dest)
    except OSError as e:
        return Err(PackagingError(path=dest, reason=f"copy failed: {e}"))
    return Ok(dest)


def stamp_version(manifest: Path, placeholder: str, version: str) -> Result[int, PackagingError]:
    """Replace every ``placeholder`` in ``manifest`` with ``version``.

    Returns the number of replacements made.
    """
    try:
        text = manifest.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(PackagingError(path=manifest, reason="manifest not found"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(PackagingError(path=manifest, reason=f"cannot read manifest: {e}"))

    count = text.count(placeholder)
    try:
        manifest.write_text(text.replace(placeholder, version), encoding="utf-8")
    except OSError as e:
        return Err(PackagingError(path=manifest, reason=f"cannot write manifest: {e}"))
    return Ok(count)


def collect_files(base_dir: Path) -> list[tuple[Path, str]]:
    """(path, archive name) for every file under ``base_dir``, sorted."""
    out: list[tuple[Path, str]] = []
    for p in sorted(base_dir.rglob("*")):
        if p.is_dir():
            continue
        out.append((p, p.relative_to(base_dir).as_posix()))
    return out


def create_archive(source_dir: Path, dest_zip: Path) -> Result[Path, PackagingError]:
    """Zip the contents of ``source_dir`` (not the directory itself) into ``dest_zip``."""
    if not source_dir.is_dir():
        return Err(PackagingError(path=source_dir, reason="source directory not found"))

    dest = dest_zip.resolve()
    files = [(p, arc) for p, arc in collect_files(source_dir) if p.resolve() != dest]
    if not files:
        return Err(PackagingError(path=source_dir, reason="source directory is empty"))

    try:
        dest_zip.parent.mkdir(parents=True, exist_ok=True)
        # Files restored from some caches carry mtime=0, which ZIP cannot store.
        with ZipFile(dest_zip, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
            for src, arc in files:
                zf.write(src, arcname=arc)
    except OSError as e:
        return Err(PackagingError(path=dest_zip, reason=f"cannot write archive: {e}"))
    return Ok(dest_zip)
