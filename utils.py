from typing import Callable


SERIAL_WIDTH = 9

_UNITS = [
    (10**18, "EB"),
    (10**15, "PB"),
    (10**12, "TB"),
    (10**9, "GB"),
    (10**6, "MB"),
    (10**3, "KB"),
]


def format_bytes(bytes_value: int) -> str:
    """Converts bytes to a human-readable string (B, KB, MB, ... EB), decimal units."""
    if bytes_value < 1000:
        return f"{bytes_value} B"
    for threshold, unit in _UNITS:
        if bytes_value >= threshold:
            return f"{bytes_value / threshold:.1f} {unit}"
    return f"{bytes_value} B"

def format_percent(percent: float) -> str:
    """One decimal place, never above "100.0"."""
    if percent > 99.99:
        return "100.0"
    return f"{percent:.1f}"

def format_serial(serial_number: int) -> str:
    """Renders a 32-bit volume serial number as `xxxx-xxxx`."""
    serial_number &= 0xFFFFFFFF
    return f"{serial_number >> 16:04x}-{serial_number & 0xFFFF:04x}"

def format_flags(flags: int) -> str:
    return f"{flags & 0xFFFFFFFF:08x}"

def escape_string(value: str) -> str:
    """Doubles every backslash. Nothing else is escaped."""
    return value.replace("\\", "\\\\")

def call_with_buffer_retry(call: Callable[[int], tuple[bool, str|None, int]], size: int) -> str|None:
    """
    Runs a buffer-filling query that may report its buffer as too small.

    `call(size)` returns (more_data, value, required_size). When the first call asks
    for more room it is repeated once with the required size; a second undersized
    answer counts as no value at all.
    """
    more_data, value, required = call(size)
    if more_data:
        more_data, value, _ = call(max(required, size + 1))
        if more_data:
            return None
    return value or None
