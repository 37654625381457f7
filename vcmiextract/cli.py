"""Command line entry point: extract game archives next to their source files."""

from __future__ import annotations

import sys
from pathlib import Path

from .archives import extract_lod, extract_snd, extract_vid
from .defs import extract_def
from .hd import extract_pak
from .reader import MemoryReader

_HANDLERS = {
    ".pak": extract_pak,
    ".lod": extract_lod,
    ".pac": extract_lod,
    ".snd": extract_snd,
    ".vid": extract_vid,
    ".def": extract_def,
    ".d32": extract_def,
}


def extract_file(source, destination):
    """Extract ``source`` into ``destination`` by its extension.

    Returns False when the file type is not recognized.
    """
    source = Path(source)
    reader = MemoryReader.from_path(source)
    handler = _HANDLERS.get(source.suffix.lower())
    if handler is None:
        print(f"unrecognized file type '{source}'")
        return False
    handler(reader, Path(destination))
    return True


def process(filename):
    """Extract one file into a directory named after its stem."""
    source = Path(filename).absolute()
    target_dir = source.parent / source.stem

    if not source.is_file():
        print(f"file '{filename}' not found!")
        return
    if target_dir.is_file():
        print(f"output path for '{filename}' is not a directory!")
        return
    extract_file(source, target_dir)


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    for filename in args:
        process(filename)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())