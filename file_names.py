"""
Conversion of arbitrary text into valid file names.
"""

import os
from typing import Iterable, Optional

RESERVED_FILE_NAMES = frozenset([
    "con", "prn", "aux", "nul",
    "com0", "com1", "com2", "com3", "com4", "com5", "com6", "com7", "com8", "com9",
    "lpt0", "lpt1", "lpt2", "lpt3", "lpt4", "lpt5", "lpt6", "lpt7", "lpt8", "lpt9",
])

WINDOWS_INVALID_FILE_NAME_CHARS = frozenset(
    ['"', '<', '>', '|', ':', '*', '?', '\\', '/'] + [chr(code) for code in range(32)]
)
POSIX_INVALID_FILE_NAME_CHARS = frozenset(['\0', '/'])

if os.name == 'nt':
    INVALID_FILE_NAME_CHARS = WINDOWS_INVALID_FILE_NAME_CHARS
else:
    INVALID_FILE_NAME_CHARS = POSIX_INVALID_FILE_NAME_CHARS


def _is_all_dots(name: str) -> bool:
    return all(c == '.' for c in name)


def to_valid_file_name(file_name: str,
                       reserved_name_format: str = "_{0}_",
                       reserved_char_format: str = "_x{0}_",
                       invalid_chars: Optional[Iterable[str]] = None,
                       reserved_names: Optional[Iterable[str]] = None) -> str:
    """
    Convert text into a valid file name.

    Reserved device names and names made only of dots (including the empty
    string) are wrapped whole with ``reserved_name_format``. Otherwise every
    invalid character is replaced by ``reserved_char_format`` applied to its
    code point in lowercase hex.

    Args:
        file_name: The text to convert
        reserved_name_format: Format for reserved names, e.g. 'con' -> '_con_'
        reserved_char_format: Format for invalid characters, e.g. ':' -> '_x3a_'
        invalid_chars: Characters to replace (default: host platform set)
        reserved_names: Lowercase reserved names (default: device names)

    Returns:
        A valid file name; the input itself when nothing needed replacing
    """
    if file_name is None:
        raise ValueError("file_name must not be None")
    if reserved_name_format is None:
        raise ValueError("reserved_name_format must not be None")
    if reserved_char_format is None:
        raise ValueError("reserved_char_format must not be None")

    if reserved_names is None:
        reserved = RESERVED_FILE_NAMES
    else:
        reserved = frozenset(name.lower() for name in reserved_names)
    invalid = INVALID_FILE_NAME_CHARS if invalid_chars is None else frozenset(invalid_chars)

    if file_name.lower() in reserved or _is_all_dots(file_name):
        return reserved_name_format.format(file_name)

    parts = []
    for c in file_name:
        if c in invalid:
            parts.append(reserved_char_format.format(f"{ord(c):x}"))
        else:
            parts.append(c)

    result = "".join(parts)
    if result == file_name:
        return file_name
    return result
