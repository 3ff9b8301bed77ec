"""SHA-256 digests recorded in render manifests.

    input_sha256:   sha256_file(csv_path)
    output_sha256:  sha256_bytes(encoded_image)
    options_sha256: hash_dict(options_to_dict(options))

Digests are lowercase hex (64 chars). Two renders with equal option hashes
and equal input hashes produce byte-identical images.
"""

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Union


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Union[str, Path], chunk_size: int = 1 << 20) -> str:
    """Digest a file without loading it whole.

    Raises
    ------
    FileNotFoundError
        If `path` does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            digest.update(chunk)
    return digest.hexdigest()


def hash_dict(d: Dict[str, Any]) -> str:
    """Digest a JSON-serializable dict independent of key order.

    Tuples serialize as lists, so (0, 0, 0, 255) and [0, 0, 0, 255] hash alike.
    """
    canonical = json.dumps(d, sort_keys=True, separators=(',', ':'))
    return sha256_bytes(canonical.encode('utf-8'))
