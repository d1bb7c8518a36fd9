# idlmend/rewrite.py
"""Batch driver: parse, validate, autofix and write back `.webidl` files in place."""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Union
import logging

from .dialects import Dialect, get_dialect, parse, write
from .validate import apply_autofixes, validate

logger = logging.getLogger(__name__)

WEBIDL_SUFFIX = ".webidl"


@dataclass
class RewriteReport:
    files_seen: int = 0
    fixes_applied: int = 0
    rewritten: List[Path] = field(default_factory=list)

    @property
    def files_rewritten(self) -> int:
        return len(self.rewritten)


def read_source(path: Path) -> str:
    """Read `path` as UTF-8 with line endings left exactly as they are."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_source(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def webidl_files(directory: Union[str, Path]) -> List[Path]:
    directory = Path(directory)
    return sorted(p for p in directory.iterdir() if p.name.endswith(WEBIDL_SUFFIX) and p.is_file())


def rewrite_file(path: Union[str, Path], dialect: Union[str, Dialect] = "gecko") -> int:
    """Fix one file in place. Returns the number of autofixes applied (0: file untouched).

    Parse errors propagate and leave the file as it was.
    """
    path = Path(path)
    d = get_dialect(dialect)
    root = parse(read_source(path), path.name, d)
    diagnostics = validate(root)
    if not diagnostics:
        return 0
    applied = apply_autofixes(diagnostics, d.admits_fix)
    if not applied:
        return 0
    write_source(path, write(root))
    logger.info("%s: applied %d fixes", path, applied)
    return applied


def rewrite(directories: Iterable[Union[str, Path]], dialect: Union[str, Dialect] = "gecko") -> RewriteReport:
    report = RewriteReport()
    for directory in directories:
        for path in webidl_files(directory):
            report.files_seen += 1
            applied = rewrite_file(path, dialect)
            if applied:
                report.fixes_applied += applied
                report.rewritten.append(path)
            else:
                logger.debug("%s: nothing to fix", path)
    return report
