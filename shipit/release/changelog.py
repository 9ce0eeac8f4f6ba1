"""Release notes from the most recent changelog section.

The changelog is plain markdown with one ``## `` header per release,
newest first:

    ## 1.2.0
    - fix A
    - fix B
    ## 1.1.0
    - old

``extract_section`` finds the section; ``assemble`` prefixes its entries
with the release tag header.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from shipit.core.pipeline_errors import SectionNotFound
from shipit.core.result import Err, Ok, Result

__all__ = ["ChangelogSection", "assemble", "extract_section", "read_changelog"]

_HEADER_PREFIX = "## "


def _is_header(line: str) -> bool:
    return line.startswith(_HEADER_PREFIX)


def _normalize(identifier: str) -> str:
    return identifier.strip().strip("[]").removeprefix("v")


def _header_matches(line: str, section: str) -> bool:
    title = line[len(_HEADER_PREFIX) :].strip()
    if not title:
        return False
    return _normalize(title.split()[0]) == _normalize(section)


@dataclass(frozen=True, slots=True)
class ChangelogSection:
    """Entry lines of one section, read lazily from the document.

    Every ``iter()`` scans the text again from the section header, so the
    section can be consumed any number of times. Blank lines are dropped;
    entry order is kept.
    """

    text: str
    header_line: int

    @property
    def header(self) -> str:
        return self.text.splitlines()[self.header_line]

    def __iter__(self) -> Iterator[str]:
        for line in self.text.splitlines()[self.header_line + 1 :]:
            if _is_header(line):
                return
            entry = line.rstrip()
            if entry.strip():
                yield entry


def extract_section(
    changelog: str,
    section: str | None = None,
    *,
    source: Path | None = None,
) -> Result[ChangelogSection, SectionNotFound]:
    """Locate the first section, or the one whose header names ``section``."""
    for index, line in enumerate(changelog.splitlines()):
        if not _is_header(line):
            continue
        if section is None or _header_matches(line, section):
            return Ok(ChangelogSection(text=changelog, header_line=index))
    return Err(SectionNotFound(section=section, source=source))


def read_changelog(path: Path) -> Result[str, SectionNotFound]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(SectionNotFound(section=None, source=path, reason=str(e)))


def assemble(tag: str, entries: Iterable[str]) -> str:
    """``## {tag}`` followed by the entries, one per line, in order."""
    return "\n".join([f"## {tag}", *entries])
