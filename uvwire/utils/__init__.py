"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Option/config validation (validators)
    - UV ↔ pixel mapping (compute)
    - RGBA colors (color)
    - Atomic I/O (fs)
    - Hashing for provenance (hashing)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (data_pipeline, renderer).

Convenience imports:
    from uvwire.utils import fs, compute, color, validators
    from uvwire.utils.logging_config import setup_logging, get_logger
"""

from . import color
from . import compute
from . import fs
from . import hashing
from . import logging_config
from . import validators

from .logging_config import get_logger, log_context, setup_logging

__all__ = [
    # Modules
    'color',
    'compute',
    'fs',
    'hashing',
    'logging_config',
    'validators',
    # Direct exports
    'setup_logging',
    'get_logger',
    'log_context',
]
