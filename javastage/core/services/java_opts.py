"""
JAVA_OPTS fragments — build-time store and run-time composer.

Every plugin that needs to contribute JVM options writes a small fragment
file instead of editing a shared string:

    <deps>/<idx>/java_opts/<NN>_<owner>.opts

At application start, ``profile.d/00_java_opts.sh`` (written once per
build by the coordinator) concatenates all fragments in ascending
priority order, expands three placeholders and exports the result as
JAVA_OPTS.  :func:`compose` is the same algorithm in Python; the two
must stay in step.

Placeholders, expanded per fragment in exactly this order:
    $DEPS_DIR   deps root of the running container
    $HOME       home directory of the running application
    $JAVA_OPTS  JAVA_OPTS as supplied by the user, captured before the loop

Fragments are read in byte order of their file names, which is ascending
priority (the prefix is zero-padded) and, within one priority, byte order
of the owner name.
"""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from javastage.core.errors import StagingWriteError

logger = logging.getLogger(__name__)

# ── Well-known priorities ───────────────────────────────────────

PRIORITY_JRE = 5
PRIORITY_DEBUG = 20
PRIORITY_JMX = 29
PRIORITY_AGENT = 40
PRIORITY_USER = 99  # user intent always applies last

MIN_PRIORITY = 0
MAX_PRIORITY = 99

FRAGMENT_SUFFIX = ".opts"
ASSEMBLY_SCRIPT_NAME = "00_java_opts.sh"

_OWNER_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_FRAGMENT_RE = re.compile(r"^(\d{2})_([A-Za-z0-9_.-]+)\.opts$")


@dataclass(frozen=True)
class Fragment:
    """One priority-tagged piece of JAVA_OPTS."""

    priority: int
    owner: str
    content: str

    @property
    def filename(self) -> str:
        return fragment_filename(self.priority, self.owner)


def fragment_filename(priority: int, owner: str) -> str:
    return f"{priority:02d}_{owner}{FRAGMENT_SUFFIX}"


class FragmentStore:
    """Directory of fragments for one build."""

    def __init__(self, directory: Path):
        self._dir = directory

    @property
    def directory(self) -> Path:
        return self._dir

    def write(self, priority: int, owner: str, content: str) -> Path:
        """Write (or overwrite) the fragment keyed by ``(priority, owner)``.

        Raises:
            ValueError: For an out-of-range priority or unsafe owner name.
            StagingWriteError: If the file cannot be written.
        """
        if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
            raise ValueError(f"Fragment priority must be 0-99, got {priority}")
        if not _OWNER_RE.match(owner):
            raise ValueError(f"Invalid fragment owner name: {owner!r}")

        path = self._dir / fragment_filename(priority, owner)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StagingWriteError(f"Cannot write {path}: {e}") from e

        logger.debug("Wrote JAVA_OPTS fragment %s (priority %d)", path.name, priority)
        return path

    def fragments(self) -> list[Fragment]:
        """All fragments in composition order."""
        if not self._dir.is_dir():
            return []

        found: list[Fragment] = []
        for path in self._dir.iterdir():
            match = _FRAGMENT_RE.match(path.name)
            if not match or not path.is_file():
                continue
            found.append(
                Fragment(
                    priority=int(match.group(1)),
                    owner=match.group(2),
                    content=path.read_text(encoding="utf-8"),
                )
            )
        found.sort(key=lambda f: f.filename)
        return found

    def reset(self) -> None:
        """Remove every fragment so a build starts from an empty store."""
        if not self._dir.exists():
            return
        try:
            shutil.rmtree(self._dir)
        except OSError as e:
            raise StagingWriteError(f"Cannot reset {self._dir}: {e}") from e


def compose(
    fragments: Iterable[Fragment],
    deps_dir: str,
    home: str,
    original: str = "",
) -> str:
    """Assemble the effective JAVA_OPTS from fragments.

    ``fragments`` must already be in store order.  ``original`` is the
    user's JAVA_OPTS at start time; every fragment that references
    ``$JAVA_OPTS`` sees this same value.
    """
    parts: list[str] = []
    for fragment in fragments:
        content = fragment.content.rstrip("\n")
        content = content.replace("$DEPS_DIR", deps_dir)
        content = content.replace("$HOME", home)
        content = content.replace("$JAVA_OPTS", original)
        if content:
            parts.append(content)
    return " ".join(parts).strip()


# ── Runtime script ──────────────────────────────────────────────

ASSEMBLY_SCRIPT_VERSION = 2

_ASSEMBLY_TEMPLATE = """\
#!/bin/bash
# javastage JAVA_OPTS assembly, template version @VERSION@
# Reads $DEPS_DIR/@INDEX@/java_opts/*.opts in order and exports JAVA_OPTS.
# Only $DEPS_DIR, $HOME and $JAVA_OPTS are expanded inside fragments.

USER_JAVA_OPTS="$JAVA_OPTS"
JAVA_OPTS=""

if [ -d "$DEPS_DIR/@INDEX@/java_opts" ]; then
    # LC_ALL outranks LC_COLLATE, so only LC_ALL=C guarantees a byte-order glob
    _saved_lc_all="${LC_ALL-}"
    _had_lc_all="${LC_ALL+x}"
    LC_ALL=C
    opts_files=("$DEPS_DIR/@INDEX@/java_opts"/*.opts)
    if [ -n "$_had_lc_all" ]; then LC_ALL="$_saved_lc_all"; else unset LC_ALL; fi

    for opts_file in "${opts_files[@]}"; do
        [ -f "$opts_file" ] || continue
        opts_content=$(cat "$opts_file")
        opts_content=${opts_content//\\$DEPS_DIR/"$DEPS_DIR"}
        opts_content=${opts_content//\\$HOME/"$HOME"}
        opts_content=${opts_content//\\$JAVA_OPTS/"$USER_JAVA_OPTS"}
        if [ -n "$opts_content" ]; then
            JAVA_OPTS="$JAVA_OPTS $opts_content"
        fi
    done
    unset opts_files opts_file opts_content _saved_lc_all _had_lc_all
fi

# trim the ends only; inner whitespace and newlines are kept
JAVA_OPTS="${JAVA_OPTS#"${JAVA_OPTS%%[![:space:]]*}"}"
JAVA_OPTS="${JAVA_OPTS%"${JAVA_OPTS##*[![:space:]]}"}"

export JAVA_OPTS
"""


def render_assembly_script(deps_index: str) -> str:
    """Render the profile.d script for this buildpack's deps slot.

    The deps index is the only build-time value substituted into the
    template.
    """
    if not deps_index.isdigit():
        raise ValueError(f"Deps index must be numeric, got {deps_index!r}")
    return (
        _ASSEMBLY_TEMPLATE.replace("@VERSION@", str(ASSEMBLY_SCRIPT_VERSION))
        .replace("@INDEX@", deps_index)
    )
