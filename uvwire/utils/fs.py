"""File I/O for the render CLI: CSV input, image/manifest output.

Outputs are published atomically: bytes go to a temp file in the target
directory, are fsynced, then os.replace()d over the target. A host shell
watching the output folder sees either the old image or the new one,
never a truncated file.

The rendering core never touches the filesystem; only scripts/ and the
CSV loader call into this module.

Usage:
    from uvwire.utils import fs
    fs.atomic_write_bytes(out_dir / "uvmap.png", png_bytes)
    fs.atomic_yaml_dump(manifest, out_dir / "uvmap_manifest.yaml")
    text = fs.read_text("exports/body_uv.csv")   # BOM stripped
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, Optional, Union

import yaml

PathLike = Union[str, Path]


class AtomicWriteError(RuntimeError):
    """An output file could not be published; the previous file is untouched."""


def ensure_dir(p: PathLike) -> Path:
    """mkdir -p; returns the directory as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


@contextlib.contextmanager
def atomic_writer(path: PathLike) -> Iterator[BinaryIO]:
    """Open a binary temp file that replaces `path` when the block exits cleanly.

    Parameters
    ----------
    path : str or Path
        Final file path; parent directories are created

    Yields
    ------
    BinaryIO
        Writable file object

    Raises
    ------
    AtomicWriteError
        If the directory, temp file, write or final rename fails; the temp
        file is removed and any existing file at `path` is left untouched
    """
    path = Path(path)
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=ensure_dir(path.parent))
        with os.fdopen(fd, 'wb') as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        _discard(tmp_name)
        raise AtomicWriteError(f"Failed to write {path} atomically: {e}") from e
    except BaseException:
        _discard(tmp_name)
        raise


def _discard(tmp_name: Optional[str]) -> None:
    if tmp_name is not None:
        Path(tmp_name).unlink(missing_ok=True)


def atomic_write_bytes(path: PathLike, data: bytes) -> None:
    """Publish an encoded image (or any byte payload) at `path`."""
    with atomic_writer(path) as f:
        f.write(data)


def atomic_yaml_dump(obj: Any, path: PathLike) -> None:
    """Write `obj` as block-style UTF-8 YAML, keeping dict key order."""
    with atomic_writer(path) as f:
        yaml.safe_dump(
            obj,
            f,
            encoding='utf-8',
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True
        )


def read_text(path: PathLike, encoding: str = "utf-8-sig") -> str:
    """Read a whole text file; the default codec drops a leading UTF-8 BOM.

    Raises
    ------
    FileNotFoundError
        If `path` is missing or is not a regular file
    UnicodeDecodeError
        If the bytes are invalid in `encoding`
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_text(encoding=encoding)


def load_yaml(path: PathLike) -> Dict[str, Any]:
    """Parse a YAML file with safe_load; an empty file gives {}.

    Raises
    ------
    FileNotFoundError
        If the file is missing
    yaml.YAMLError
        If the content is not valid YAML (message names the file)
    """
    text = read_text(path, encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
    return data if data is not None else {}
