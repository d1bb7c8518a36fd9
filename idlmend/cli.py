# idlmend/cli.py
"""idlmend command line

Usage)
    $ idlmend-gecko  path/to/dom/webidl path/to/dom/chrome-webidl
    $ idlmend-webidl path/to/components/script/dom/webidls

Each directory's `*.webidl` files are parsed, validated and rewritten in
place when the dialect's autofixes change something.

- idlmend-gecko  : gecko grammar extensions, every autofix except require-exposed
- idlmend-webidl : baseline grammar, replace-void only

Exit status: 0 on success, 2 on a syntax error or a missing directory.
"""

from __future__ import annotations
import argparse
import logging
import pathlib
import sys
from typing import Optional

from .rewrite import rewrite

logger = logging.getLogger(__name__)


def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)


def _configure_logging() -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("idlmend")
    if not root.handlers:
        root.addHandler(handler)
    root.setLevel(logging.INFO)


def main(argv: Optional[list[str]] = None, *, dialect: str = "gecko", prog: Optional[str] = None) -> int:
    ap = argparse.ArgumentParser(prog=prog or f"idlmend-{dialect}",
                                 description=f"Parse and fix up {dialect} Web IDL files in place")
    ap.add_argument("directories", nargs="+", metavar="path-to-webidl", help="directory holding .webidl files")
    args = ap.parse_args(argv)
    _configure_logging()

    for directory in args.directories:
        if not pathlib.Path(directory).is_dir():
            _eprint(f"[ERROR] Not a directory: {directory}")
            return 2

    try:
        report = rewrite(args.directories, dialect)
    except SyntaxError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(str(e))
        return 2

    logger.debug("files=%d rewritten=%d fixes=%d", report.files_seen, report.files_rewritten, report.fixes_applied)
    return 0


def main_gecko(argv: Optional[list[str]] = None) -> int:
    return main(argv, dialect="gecko")


def main_webidl(argv: Optional[list[str]] = None) -> int:
    return main(argv, dialect="webidl")


if __name__ == "__main__":
    sys.exit(main_gecko())
