"""
pricetoml/verify_table.py

Integrity check for a generated price table: recompute the SHA-256 of the
model section and compare it with ``[metadata].checksum``.
"""
from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import ParseError
from .toml_writer import generate_checksum

_FIRST_MODEL_HEADER = re.compile(r'^\[models\."', re.MULTILINE)


@dataclass
class VerificationResult:
    path: Path
    expected: Optional[str]  # checksum recorded in [metadata]
    actual: str
    version: Optional[str]
    total_models: Optional[int]

    @property
    def ok(self) -> bool:
        return self.expected == self.actual


def extract_models_section(text: str) -> str:
    """Return the model section exactly as it was hashed when written."""
    match = _FIRST_MODEL_HEADER.search(text)
    if match is None:
        return ""
    section = text[match.start():]
    # The writer terminates the document with a single newline
    return section[:-1] if section.endswith("\n") else section


def read_metadata(text: str) -> Dict[str, Any]:
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ParseError(f"Price table is not valid TOML: {e}") from e
    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        raise ParseError("Price table has no [metadata] table")
    return metadata


def verify_price_table(path: Union[str, Path]) -> VerificationResult:
    """Check the stored checksum of the price table at *path*.

    Raises:
        FileNotFoundError: *path* does not exist.
        ParseError: the file is not valid TOML or has no metadata.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    metadata = read_metadata(text)
    return VerificationResult(
        path=path,
        expected=metadata.get("checksum"),
        actual=generate_checksum(extract_models_section(text)),
        version=metadata.get("version"),
        total_models=metadata.get("total_models"),
    )
