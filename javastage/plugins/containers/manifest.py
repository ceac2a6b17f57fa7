"""
Minimal JAR manifest reading for container detection.

Only ``Key: Value`` lines of an exploded ``META-INF/MANIFEST.MF`` are
read; continuation lines and sections are ignored.
"""

from __future__ import annotations

from pathlib import Path

MANIFEST_PATH = ("META-INF", "MANIFEST.MF")


def read_manifest(root: Path) -> dict[str, str]:
    path = root.joinpath(*MANIFEST_PATH)
    if not path.is_file():
        return {}
    try:
        lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError:
        return {}

    entries: dict[str, str] = {}
    for line in lines:
        if not line or line.startswith(" ") or ":" not in line:
            continue
        key, _, value = line.partition(":")
        entries[key.strip()] = value.strip()
    return entries


def find_jars(directory: Path) -> list[str]:
    """Top-level JAR names in ``directory``, sorted."""
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.glob("*.jar") if p.is_file())
