"""Snapshot writer: persists artifacts without ever touching earlier ones.

For an artifact identity (directory, base name, extension):

* missing -> the file is created with the content;
* present, diff mode off -> a ``<base>_<timestamp><ext>`` sibling is written;
* present, diff mode on -> a line diff against the existing file is written
  to ``<base>_diff_<timestamp>.diff``.

Existing files are never truncated or deleted. Timestamps are UTC and sort
chronologically; two writes of the same identity within one second get a
numeric suffix instead of colliding.
"""

import difflib
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union
import structlog

from kubesnap.core.utils import snapshot_timestamp

logger = structlog.get_logger(__name__)

YAML = ".yaml"
OUT = ".out"
LOG = ".log"
DIFF = ".diff"


def _common_prefix(a: List[str], b: List[str]) -> int:
    n = 0
    limit = min(len(a), len(b))
    while n < limit and a[n] == b[n]:
        n += 1
    return n


def render_line_diff(previous: str, current: str) -> str:
    """Render a line diff: `-` for deletions, `+` for insertions, equal lines bare.

    Lines are compared with their endings, so a dropped or added final
    newline shows up as a changed last line. Unchanged head and tail lines
    are matched in a single pass; only the changed middle goes through
    SequenceMatcher.
    """
    old_lines = previous.splitlines(keepends=True)
    new_lines = current.splitlines(keepends=True)

    head = _common_prefix(old_lines, new_lines)
    tail = _common_prefix(old_lines[head:][::-1], new_lines[head:][::-1])
    old_middle = old_lines[head:len(old_lines) - tail]
    new_middle = new_lines[head:len(new_lines) - tail]

    rendered = list(old_lines[:head])
    matcher = difflib.SequenceMatcher(None, old_middle, new_middle)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            rendered.extend(old_middle[i1:i2])
            continue
        if tag in ("replace", "delete"):
            rendered.extend("-" + line for line in old_middle[i1:i2])
        if tag in ("replace", "insert"):
            rendered.extend("+" + line for line in new_middle[j1:j2])
    rendered.extend(old_lines[len(old_lines) - tail:])

    if not rendered:
        return ""
    return "\n".join(line.rstrip("\r\n") for line in rendered) + "\n"


class SnapshotWriter:
    """Writes artifacts according to the snapshot versioning rules."""

    def __init__(self, diff_mode: bool = False, clock: Optional[Callable[[], datetime]] = None):
        self.diff_mode = diff_mode
        self.clock = clock
        self.logger = logger.bind(component="snapshot_writer")

    def write(self,
              path: Union[str, Path],
              base_name: str,
              content: str,
              extension: str = YAML,
              diff_mode: Optional[bool] = None) -> Path:
        """Persist content and return the path of the file written."""
        directory = Path(path)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / f"{base_name}{extension}"

        if not target.exists():
            self._append(target, content)
            self.logger.debug("Created artifact", path=str(target))
            return target

        diff = self.diff_mode if diff_mode is None else diff_mode
        timestamp = self._timestamp()

        if diff:
            previous = target.read_text(encoding="utf-8", errors="replace")
            written = self._create_unique(directory, f"{base_name}_diff_{timestamp}", DIFF,
                                          render_line_diff(previous, content))
            self.logger.debug("Wrote diff artifact", path=str(written), base=str(target))
        else:
            written = self._create_unique(directory, f"{base_name}_{timestamp}", extension, content)
            self.logger.debug("Wrote timestamped artifact", path=str(written), base=str(target))
        return written

    def fresh_directory(self, path: Union[str, Path], base_name: str) -> Path:
        """Return a directory that did not exist before, creating it.

        `<path>/<base_name>` on the first run, a timestamp-suffixed sibling
        after that.
        """
        parent = Path(path)
        parent.mkdir(parents=True, exist_ok=True)
        candidate = parent / base_name
        counter = 0
        stem = base_name
        while True:
            try:
                candidate.mkdir()
                return candidate
            except FileExistsError:
                if stem == base_name:
                    stem = f"{base_name}_{self._timestamp()}"
                    candidate = parent / stem
                else:
                    counter += 1
                    candidate = parent / f"{stem}_{counter}"

    def _timestamp(self) -> str:
        return snapshot_timestamp(self.clock() if self.clock else None)

    @staticmethod
    def _append(target: Path, content: str) -> None:
        with open(target, "a", encoding="utf-8", newline="") as f:
            f.write(content)

    @staticmethod
    def _create_unique(directory: Path, stem: str, extension: str, content: str) -> Path:
        candidate = directory / f"{stem}{extension}"
        counter = 0
        while True:
            try:
                with open(candidate, "x", encoding="utf-8", newline="") as f:
                    f.write(content)
                return candidate
            except FileExistsError:
                counter += 1
                candidate = directory / f"{stem}_{counter}{extension}"
