"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Conversions between byte counts and the size strings accepted by --min-size.
Units are binary: K, KB and KiB all mean 1024 bytes.
"""
import re

UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

_SIZE_RE = re.compile(
    r"^(?P<value>\d+(?:\.\d*)?|\.\d+)\s*(?:(?P<unit>[KMGTP])(?:I?B)?|B)?$",
    re.IGNORECASE
)


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """Formats a byte count as '17B', '1.50KB', '3.20MB'; negatives read as 0B."""
        if size_bytes < 0:
            return "0B"
        if size_bytes < 1024:
            return f"{size_bytes}B"

        exponent = 0
        while exponent < len(UNITS) - 1 and size_bytes >= 1024 ** (exponent + 1):
            exponent += 1
        return f"{size_bytes / 1024 ** exponent:.2f}{UNITS[exponent]}"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Parses '1000', '17B', '1K', '1.5MB' or '2GiB' (case-insensitive) into bytes.
        Raises ValueError for negative sizes or anything else.
        """
        text = size_str.strip()
        if text.startswith("-"):
            raise ValueError(f"Negative size not allowed: '{size_str}'")

        match = _SIZE_RE.match(text)
        if not match:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1000, 17B, 1K, 2048KB, 1.5GB, 2GiB"
            )

        unit = (match.group("unit") or "").upper()
        multiplier = 1024 ** ("BKMGTP".index(unit) if unit else 0)
        return int(float(match.group("value")) * multiplier)

    @staticmethod
    def is_valid_size_format(size_str: str) -> bool:
        try:
            ConvertUtils.human_to_bytes(size_str)
            return True
        except ValueError:
            return False
