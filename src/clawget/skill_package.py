from __future__ import annotations

import hashlib
import io
import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB
MANIFEST_FILENAME = "SKILL.md"

# Directory/file names to skip anywhere in the tree.
DEFAULT_EXCLUDE_NAMES = {
    ".git",
    ".hg",
    ".svn",
    ".DS_Store",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".venv",
    "venv",
    "node_modules",
    ".idea",
    ".vscode",
}


@dataclass(frozen=True)
class SkillPackage:
    root: Path
    zip_bytes: bytes
    sha256: str
    size_bytes: int
    file_count: int
    warnings: list[str]

    @property
    def filename(self) -> str:
        return f"{self.root.name}.zip"


class SkillPackageError(RuntimeError):
    pass


def _should_exclude(path: Path, root: Path) -> bool:
    try:
        rel = path.relative_to(root)
    except ValueError:
        return True
    return any(p in DEFAULT_EXCLUDE_NAMES for p in rel.parts)


def package_skill(root: Path, *, max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> SkillPackage:
    """Zip a skill folder for upload. The folder must contain SKILL.md at its root."""
    root = root.expanduser().resolve()
    if not root.exists():
        raise SkillPackageError(f"Path does not exist: {root}")
    if not root.is_dir():
        raise SkillPackageError(f"Not a directory: {root}")
    if not (root / MANIFEST_FILENAME).is_file():
        raise SkillPackageError(f"Missing required file: {root / MANIFEST_FILENAME}")

    files = [
        p for p in root.rglob("*")
        if not _should_exclude(p, root) and not p.is_symlink() and p.is_file()
    ]
    files.sort(key=lambda p: str(p.relative_to(root)).lower())

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for p in files:
            zf.write(p, arcname=str(p.relative_to(root)).replace(os.sep, "/"))

    zip_bytes = buf.getvalue()
    warnings: list[str] = []
    if len(zip_bytes) > max_upload_bytes:
        warnings.append(f"Packaged zip is {len(zip_bytes)} bytes which exceeds the {max_upload_bytes} byte upload limit.")

    return SkillPackage(
        root=root,
        zip_bytes=zip_bytes,
        sha256=hashlib.sha256(zip_bytes).hexdigest(),
        size_bytes=len(zip_bytes),
        file_count=len(files),
        warnings=warnings,
    )


def _safe_extract_zip(zip_bytes: bytes, dest: Path) -> None:
    dest.mkdir(parents=True, exist_ok=True)
    base = dest.resolve()
    with zipfile.ZipFile(io.BytesIO(zip_bytes), "r") as zf:
        for info in zf.infolist():
            name = info.filename
            if not name:
                continue
            if name.startswith("/"):
                raise SkillPackageError(f"Archive contains an absolute path entry: {name!r}")
            target = (dest / name).resolve()
            if not str(target).startswith(str(base) + os.sep) and target != base:
                raise SkillPackageError(f"Archive contains an invalid path entry: {name!r}")

            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info, "r") as src, target.open("wb") as out:
                shutil.copyfileobj(src, out)


def install_package(zip_bytes: bytes, dest: Path) -> Path:
    """
    Unpack a downloaded skill archive into ``dest``.

    ``dest`` must not exist yet (FileExistsError otherwise). Archives that wrap
    everything in a single top-level folder are flattened into ``dest``.
    """
    dest = dest.expanduser()
    if dest.exists():
        raise FileExistsError(str(dest))
    dest.parent.mkdir(parents=True, exist_ok=True)

    try:
        with tempfile.TemporaryDirectory(prefix="clawget-", dir=dest.parent) as td:
            unpack_root = Path(td) / "unpacked"
            _safe_extract_zip(zip_bytes, unpack_root)

            source_root = unpack_root
            children = list(unpack_root.iterdir())
            if len(children) == 1 and children[0].is_dir():
                source_root = children[0]
            shutil.move(str(source_root), str(dest))
    except zipfile.BadZipFile as e:
        raise SkillPackageError(f"Downloaded package is not a valid zip archive: {e}") from e
    return dest
