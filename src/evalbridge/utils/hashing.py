"""Hashing utilities for module naming."""

import hashlib
import re
from pathlib import Path


def hash_value(value: str) -> str:
    """Create a deterministic hash of a string.

    Args:
        value: The string to hash.

    Returns:
        A hexadecimal hash string (first 16 chars of SHA-256).
    """
    return hashlib.sha256(value.encode()).hexdigest()[:16]


def module_name_for_path(path: Path) -> str:
    """Build a private, collision-free module name for a source file.

    Two files with the same stem in different directories get
    different names, so evaluating one never shadows the other.

    Args:
        path: Absolute path of the source file.

    Returns:
        A module name without dots.
    """
    stem = re.sub(r"\W", "_", path.stem) or "module"
    return f"_evalbridge_{stem}_{hash_value(str(path))}"
