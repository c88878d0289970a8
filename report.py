"""
Renders drive records as an aligned text table or as a structured (JSON-shaped) document.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Sequence

from drive_info import CAPABILITIES, DriveKind, DriveRecord
from utils import (SERIAL_WIDTH, escape_string, format_bytes, format_flags,
    format_percent, format_serial)


INDENT = "    "


class NoRootPolicy(enum.Enum):
    """What to do with drives that are enumerated but have no root directory."""
    SKIP = "skip"
    DIAGNOSE = "diagnose"


@dataclass(frozen=True)
class AggregateWidths:
    label: int = 0
    kind: int = 0
    filesystem: int = 0


def label_field(record: DriveRecord) -> str:
    if record.volume is not None and record.volume.label:
        return f'"{record.volume.label}"'
    return "-"

def serial_field(record: DriveRecord) -> str:
    if record.volume is None:
        return "-".ljust(SERIAL_WIDTH)
    return format_serial(record.volume.serial_number)

def filesystem_field(record: DriveRecord) -> str:
    if record.volume is None:
        return "-"
    return f"[{record.volume.filesystem}]"

def redirection_field(record: DriveRecord) -> str:
    if record.redirection.substitution:
        return f"=== {record.redirection.substitution}"
    if record.redirection.network_mapping:
        return f"--> {record.redirection.network_mapping}"
    return record.volume_name or ""


def compute_widths(records: Iterable[DriveRecord]) -> AggregateWidths:
    """Maximum rendered width of the label, drive kind and file system columns."""
    label = kind = filesystem = 0
    for record in records:
        label = max(label, len(label_field(record)))
        kind = max(kind, len(record.kind.description))
        filesystem = max(filesystem, len(filesystem_field(record)))
    return AggregateWidths(label, kind, filesystem)


def _table_records(records: Sequence[DriveRecord]) -> list[DriveRecord]:
    return [record for record in records if record.kind is not DriveKind.NO_ROOT_DIRECTORY]

def no_root_diagnostic(record: DriveRecord) -> str:
    return f"{record.drive}   Drive type is {record.kind.description}, but the system reports a drive there."

def format_row(record: DriveRecord, widths: AggregateWidths) -> str:
    columns = [
        record.drive,
        label_field(record).ljust(widths.label),
        serial_field(record),
        record.kind.description.ljust(widths.kind),
        filesystem_field(record).ljust(widths.filesystem),
        redirection_field(record),
    ]
    return " ".join(columns).rstrip()

def format_capacity(record: DriveRecord) -> str|None:
    capacity = record.capacity
    if capacity is None:
        return None
    free = format_bytes(capacity.bytes_free)
    total = format_bytes(capacity.bytes_total)
    if capacity.percent_free is None:
        return f"{INDENT}{free} free of {total}"
    return f"{INDENT}{free} free ({format_percent(capacity.percent_free)}%) of {total}"

def format_capabilities(record: DriveRecord) -> list[str]:
    volume = record.volume
    if volume is None:
        return []
    lines = [
        f"{INDENT}Max component length: {volume.max_component_length}",
        f"{INDENT}File system flags: {format_flags(volume.flags)}",
    ]
    for flag, _, description in CAPABILITIES:
        lines.append(f"{INDENT}{'Yes' if volume.has(flag) else 'No '}: {description}")
    return lines


def render_human(records: Sequence[DriveRecord], verbose: bool = False, show_flags: bool = False,
                 no_root: NoRootPolicy = NoRootPolicy.SKIP) -> str:
    """
    Aligned, one row per drive. Column widths come from the whole record set
    before any row is produced.
    """
    widths = compute_widths(_table_records(records))
    lines = []

    for record in records:
        if record.kind is DriveKind.NO_ROOT_DIRECTORY:
            if no_root is NoRootPolicy.DIAGNOSE:
                lines.append(no_root_diagnostic(record))
            continue

        lines.append(format_row(record, widths))
        if verbose:
            capacity_line = format_capacity(record)
            if capacity_line:
                lines.append(capacity_line)
        if show_flags:
            lines.extend(format_capabilities(record))

    return "".join(line + "\n" for line in lines)


def _literal(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_percent(value)
    return f'"{escape_string(str(value))}"'

def _render_object(pairs: list[tuple[str, object]], depth: int) -> str:
    pad = "  " * (depth + 1)
    body = []
    for key, value in pairs:
        if isinstance(value, list):
            rendered = _render_object(value, depth + 1)
        else:
            rendered = _literal(value)
        body.append(f'{pad}"{key}": {rendered}')
    return "{\n" + ",\n".join(body) + "\n" + "  " * depth + "}"

def structured_pairs(record: DriveRecord) -> list[tuple[str, object]]:
    """Key/value pairs for one drive; None stands for an unknown value."""
    volume = record.volume
    pairs = [
        ("drive", record.drive),
        ("volumeName", record.volume_name),
        ("driveType", record.kind.description),
        ("driveSubst", record.redirection.substitution),
        ("netMap", record.redirection.network_mapping),
    ]
    if volume is not None:
        pairs += [
            ("serialNumber", format_serial(volume.serial_number)),
            ("label", volume.label),
            ("maxComponentLength", volume.max_component_length),
            ("fileSystem", volume.filesystem),
            ("fileSysFlags", format_flags(volume.flags)),
            ("flags", [(key, volume.has(flag)) for flag, key, _ in CAPABILITIES]),
        ]
    else:
        pairs += [(key, None) for key in
                  ("serialNumber", "label", "maxComponentLength", "fileSystem", "fileSysFlags", "flags")]

    capacity = record.capacity
    if capacity is not None:
        pairs += [
            ("bytesTotal", capacity.bytes_total),
            ("bytesTotalPretty", format_bytes(capacity.bytes_total)),
            ("bytesFree", capacity.bytes_free),
            ("bytesFreePretty", format_bytes(capacity.bytes_free)),
            ("percentFree", capacity.percent_free),
        ]
    return pairs


def render_structured(records: Sequence[DriveRecord], no_root: NoRootPolicy = NoRootPolicy.SKIP) -> str:
    """Array of per-drive objects, in the order of `records`."""
    if no_root is NoRootPolicy.SKIP:
        records = _table_records(records)
    if not records:
        return "[]\n"
    objects = ["  " + _render_object(structured_pairs(record), 1) for record in records]
    return "[\n" + ",\n".join(objects) + "\n]\n"
