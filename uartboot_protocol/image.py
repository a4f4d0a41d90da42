# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Firmware image loading."""

from pathlib import Path
from typing import List, Union


def read_image(path: Union[str, Path]) -> List[str]:
    """
    Read a hex image file.

    Args:
        path: Path to the image (one record per line)

    Returns:
        Non-blank lines in file order, surrounding whitespace removed

    Raises:
        FileNotFoundError: If the image file does not exist
    """
    text = Path(path).read_text(encoding="ascii", errors="replace")
    return [line.strip() for line in text.splitlines() if line.strip()]
