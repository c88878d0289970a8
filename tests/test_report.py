#!/usr/bin/env python3
"""
Tests for report module
"""
import sys
import os
import json
import itertools

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from drive_info import CAPABILITIES, FileSystemFlag, RawFacts, build_drive_record
from report import (AggregateWidths, NoRootPolicy, compute_widths, render_human,
    render_structured)


VOLUME_GUID = "\\\\?\\Volume{0b1c2d3e-0000-0000-0000-100000000000}\\"


def system_drive(**overrides):
    values = dict(
        drive_type=3,
        volume_info_ok=True,
        label="SYSTEM",
        serial_number=0x1234ABCD,
        max_component_length=255,
        filesystem="NTFS",
        flags=int(FileSystemFlag.NAMED_STREAMS | FileSystemFlag.UNICODE_ON_DISK),
        free_space=(500_000_000_000, 120_000_000_000),
    )
    values.update(overrides)
    return build_drive_record("C", RawFacts(**values))


def empty_cdrom():
    return build_drive_record("D", RawFacts(drive_type=5))


def no_root(letter="Q"):
    return build_drive_record(letter, RawFacts(drive_type=1))


class TestWidths:
    def test_widths_over_all_records(self):
        widths = compute_widths([system_drive(), empty_cdrom()])
        assert widths == AggregateWidths(label=8, kind=6, filesystem=6)

    def test_placeholder_widths(self):
        assert compute_widths([empty_cdrom()]) == AggregateWidths(label=1, kind=6, filesystem=1)

    def test_empty(self):
        assert compute_widths([]) == AggregateWidths(0, 0, 0)

    def test_order_independent(self):
        records = [
            system_drive(),
            empty_cdrom(),
            build_drive_record("E", RawFacts(drive_type=2, volume_info_ok=True, label="A LONGER LABEL",
                                             filesystem="exFAT")),
        ]
        expected = compute_widths(records)
        for permutation in itertools.permutations(records):
            assert compute_widths(permutation) == expected


class TestRenderHuman:
    def test_two_drive_table(self):
        text = render_human([system_drive(), empty_cdrom()])
        assert text.splitlines() == [
            'C: "SYSTEM" 1234-abcd Fixed  [NTFS]',
            "D: -        -         CD-ROM -",
        ]

    def test_verbose_capacity_line(self):
        text = render_human([system_drive(), empty_cdrom()], verbose=True)
        assert text.splitlines() == [
            'C: "SYSTEM" 1234-abcd Fixed  [NTFS]',
            "    120.0 GB free (24.0%) of 500.0 GB",
            "D: -        -         CD-ROM -",
        ]

    def test_verbose_full_and_empty_volumes(self):
        full = system_drive(free_space=(1000, 1000))
        empty = system_drive(free_space=(0, 0))
        assert "(100.0%)" in render_human([full], verbose=True)
        assert render_human([empty], verbose=True).splitlines()[1] == "    0 B free of 0 B"

    def test_empty_label_uses_placeholder(self):
        text = render_human([system_drive(label="")])
        assert text == "C: - 1234-abcd Fixed [NTFS]\n"

    def test_substitution_shown_before_mapping(self):
        record = system_drive(substitution="C:\\work", network_mapping="\\\\nas\\share")
        assert render_human([record]).rstrip().endswith("=== C:\\work")

    def test_network_mapping(self):
        record = system_drive(drive_type=4, network_mapping="\\\\nas\\share")
        assert render_human([record]).rstrip().endswith("Remote [NTFS] --> \\\\nas\\share")

    def test_volume_name_when_not_redirected(self):
        record = system_drive(volume_name=VOLUME_GUID)
        assert render_human([record]) == f'C: "SYSTEM" 1234-abcd Fixed [NTFS] {VOLUME_GUID}\n'

    def test_no_root_skipped_by_default(self):
        text = render_human([system_drive(), no_root()])
        assert text == 'C: "SYSTEM" 1234-abcd Fixed [NTFS]\n'

    def test_no_root_diagnostic(self):
        text = render_human([system_drive(), no_root()], no_root=NoRootPolicy.DIAGNOSE)
        assert text.splitlines()[1] == "Q:   Drive type is No root, but the system reports a drive there."

    def test_capability_listing(self):
        lines = render_human([system_drive()], show_flags=True).splitlines()
        assert lines[1] == "    Max component length: 255"
        assert lines[2] == "    File system flags: 00040004"
        assert lines[3] == "    Yes: Supports named streams"
        assert "    No : Supports object identifiers" in lines
        assert "    Yes: Supports Unicode file names" in lines
        assert len(lines) == 3 + len(CAPABILITIES)

    def test_capability_listing_skips_unknown_volume(self):
        assert render_human([empty_cdrom()], show_flags=True).splitlines() == ["D: - -         CD-ROM -"]

    def test_rows_keep_input_order(self):
        records = [build_drive_record(letter, RawFacts(drive_type=3)) for letter in "ZAM"]
        assert [line[:2] for line in render_human(records).splitlines()] == ["Z:", "A:", "M:"]

    def test_nothing_to_render(self):
        assert render_human([]) == ""


class TestRenderStructured:
    def test_parses_as_json(self):
        document = json.loads(render_structured([system_drive(volume_name=VOLUME_GUID), empty_cdrom()]))
        assert [item["drive"] for item in document] == ["C:", "D:"]

        system = document[0]
        assert system["volumeName"] == VOLUME_GUID
        assert system["driveType"] == "Fixed"
        assert system["serialNumber"] == "1234-abcd"
        assert system["label"] == "SYSTEM"
        assert system["maxComponentLength"] == 255
        assert system["fileSystem"] == "NTFS"
        assert system["fileSysFlags"] == "00040004"
        assert system["flags"]["namedStreams"] is True
        assert system["flags"]["caseSensitive"] is False
        assert system["bytesTotal"] == 500_000_000_000
        assert system["bytesFree"] == 120_000_000_000
        assert system["bytesTotalPretty"] == "500.0 GB"
        assert system["bytesFreePretty"] == "120.0 GB"
        assert system["percentFree"] == pytest.approx(24.0)

    def test_absent_volume_info_is_all_null(self):
        cdrom = json.loads(render_structured([empty_cdrom()]))[0]
        for key in ("serialNumber", "label", "maxComponentLength", "fileSystem", "fileSysFlags", "flags"):
            assert key in cdrom
            assert cdrom[key] is None
        assert cdrom["volumeName"] is None
        assert "bytesTotal" not in cdrom

    def test_present_volume_info_has_no_nulls(self):
        system = json.loads(render_structured([system_drive(label="")]))[0]
        assert system["label"] == ""
        for key in ("serialNumber", "label", "maxComponentLength", "fileSystem", "fileSysFlags", "flags"):
            assert system[key] is not None
        assert len(system["flags"]) == len(CAPABILITIES)
        assert all(isinstance(value, bool) for value in system["flags"].values())

    def test_redirection_keys(self):
        subst = json.loads(render_structured([system_drive(substitution="C:\\work",
                                                           network_mapping="\\\\nas\\x")]))[0]
        assert subst["driveSubst"] == "C:\\work"
        assert subst["netMap"] is None

        mapped = json.loads(render_structured([system_drive(network_mapping="\\\\nas\\x")]))[0]
        assert mapped["driveSubst"] is None
        assert mapped["netMap"] == "\\\\nas\\x"

    def test_zero_sized_volume_has_null_percentage(self):
        item = json.loads(render_structured([system_drive(free_space=(0, 0))]))[0]
        assert item["bytesTotal"] == 0
        assert item["percentFree"] is None

    def test_label_backslashes_doubled(self):
        text = render_structured([system_drive(label="a\\b\\\\c")])
        line = next(line for line in text.splitlines() if '"label"' in line)
        assert line.strip() == '"label": "a\\\\b\\\\\\\\c",'

    def test_quotes_in_label_are_not_escaped(self):
        text = render_structured([system_drive(label='my "disk"')])
        assert '"label": "my "disk"",' in text

    def test_layout(self):
        text = render_structured([empty_cdrom(), empty_cdrom()])
        assert text.startswith("[\n  {\n")
        assert "  },\n  {\n" in text
        assert text.endswith("  }\n]\n")
        assert ",\n]" not in text

    def test_no_root_policy(self):
        assert render_structured([no_root()]) == "[]\n"
        document = json.loads(render_structured([no_root()], no_root=NoRootPolicy.DIAGNOSE))
        assert document[0]["driveType"] == "No root"
