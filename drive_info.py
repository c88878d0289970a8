"""
Per-drive data model and the builder that turns raw query results into records.
"""

import enum
from dataclasses import dataclass


DRIVE_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class DriveKind(enum.Enum):
    """Drive classification, valued by the Windows GetDriveType codes."""
    UNKNOWN = 0
    NO_ROOT_DIRECTORY = 1
    REMOVABLE = 2
    FIXED = 3
    REMOTE = 4
    CDROM = 5
    RAMDISK = 6

    @classmethod
    def from_code(cls, code: int|None) -> "DriveKind":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN

    @property
    def description(self) -> str:
        return _DRIVE_KIND_NAMES[self]


_DRIVE_KIND_NAMES = {
    DriveKind.UNKNOWN: "Unknown",
    DriveKind.NO_ROOT_DIRECTORY: "No root",
    DriveKind.REMOVABLE: "Removable",
    DriveKind.FIXED: "Fixed",
    DriveKind.REMOTE: "Remote",
    DriveKind.CDROM: "CD-ROM",
    DriveKind.RAMDISK: "RAM Disk",
}


class FileSystemFlag(enum.IntFlag):
    CASE_SENSITIVE_SEARCH = 0x00000001
    CASE_PRESERVED_NAMES = 0x00000002
    UNICODE_ON_DISK = 0x00000004
    PERSISTENT_ACLS = 0x00000008
    FILE_COMPRESSION = 0x00000010
    VOLUME_QUOTAS = 0x00000020
    SUPPORTS_SPARSE_FILES = 0x00000040
    SUPPORTS_REPARSE_POINTS = 0x00000080
    SUPPORTS_REMOTE_STORAGE = 0x00000100
    SUPPORTS_POSIX_UNLINK_RENAME = 0x00000400
    VOLUME_IS_COMPRESSED = 0x00008000
    SUPPORTS_OBJECT_IDS = 0x00010000
    SUPPORTS_ENCRYPTION = 0x00020000
    NAMED_STREAMS = 0x00040000
    READ_ONLY_VOLUME = 0x00080000
    SEQUENTIAL_WRITE_ONCE = 0x00100000
    SUPPORTS_TRANSACTIONS = 0x00200000
    SUPPORTS_HARD_LINKS = 0x00400000
    SUPPORTS_EXTENDED_ATTRIBUTES = 0x00800000
    SUPPORTS_OPEN_BY_FILE_ID = 0x01000000
    SUPPORTS_USN_JOURNAL = 0x02000000
    SUPPORTS_INTEGRITY_STREAMS = 0x04000000
    SUPPORTS_BLOCK_REFCOUNTING = 0x08000000
    SUPPORTS_SPARSE_VDL = 0x10000000
    DAX_VOLUME = 0x20000000
    SUPPORTS_GHOSTING = 0x40000000


# (flag, structured output key, human description), in report order.
CAPABILITIES = [
    (FileSystemFlag.NAMED_STREAMS, "namedStreams", "Supports named streams"),
    (FileSystemFlag.SUPPORTS_OBJECT_IDS, "objectIds", "Supports object identifiers"),
    (FileSystemFlag.SUPPORTS_REPARSE_POINTS, "reparsePoints", "Supports re-parse points"),
    (FileSystemFlag.SUPPORTS_SPARSE_FILES, "sparseFiles", "Supports sparse files"),
    (FileSystemFlag.VOLUME_QUOTAS, "volumeQuotas", "Supports disk quotas"),
    (FileSystemFlag.CASE_SENSITIVE_SEARCH, "caseSensitive", "Supports case-sensitive file names"),
    (FileSystemFlag.FILE_COMPRESSION, "fileCompression", "Supports file-based compression"),
    (FileSystemFlag.SUPPORTS_ENCRYPTION, "fileEncryption", "Supports Encrypted File System (EFS)"),
    (FileSystemFlag.UNICODE_ON_DISK, "unicodeOnDisk", "Supports Unicode file names"),
    (FileSystemFlag.CASE_PRESERVED_NAMES, "caseIsPreserved", "Preserves file name case"),
    (FileSystemFlag.PERSISTENT_ACLS, "persistentAcls", "Preserves and enforces access control lists (ACLs)"),
    (FileSystemFlag.VOLUME_IS_COMPRESSED, "volumeIsCompressed", "Volume is compressed"),
    (FileSystemFlag.SUPPORTS_REMOTE_STORAGE, "remoteStorage", "Supports remote storage"),
    (FileSystemFlag.SUPPORTS_POSIX_UNLINK_RENAME, "posixUnlinkRename", "Supports POSIX-style unlink and rename"),
    (FileSystemFlag.READ_ONLY_VOLUME, "readOnlyVolume", "Volume is read-only"),
    (FileSystemFlag.SEQUENTIAL_WRITE_ONCE, "sequentialWriteOnce", "Supports one sequential write"),
    (FileSystemFlag.SUPPORTS_TRANSACTIONS, "transactions", "Supports transactions"),
    (FileSystemFlag.SUPPORTS_HARD_LINKS, "hardLinks", "Supports hard links"),
    (FileSystemFlag.SUPPORTS_EXTENDED_ATTRIBUTES, "extendedAttributes", "Supports extended attributes"),
    (FileSystemFlag.SUPPORTS_OPEN_BY_FILE_ID, "openByFileId", "Supports open by file ID"),
    (FileSystemFlag.SUPPORTS_USN_JOURNAL, "usnJournal", "Supports update sequence number (USN) journals"),
    (FileSystemFlag.SUPPORTS_INTEGRITY_STREAMS, "integrityStreams", "Supports integrity streams"),
    (FileSystemFlag.SUPPORTS_BLOCK_REFCOUNTING, "blockRefcounting", "Supports block cloning"),
    (FileSystemFlag.SUPPORTS_SPARSE_VDL, "sparseVdl", "Supports sparse valid data length"),
    (FileSystemFlag.DAX_VOLUME, "daxVolume", "Is a direct access (DAX) volume"),
    (FileSystemFlag.SUPPORTS_GHOSTING, "ghosting", "Supports ghosting"),
]


@dataclass(frozen=True)
class VolumeInfo:
    """Information about a volume."""
    label: str
    serial_number: int
    max_component_length: int
    filesystem: str
    flags: int

    def has(self, flag: FileSystemFlag) -> bool:
        return bool(self.flags & flag)


class RedirectionKind(enum.Enum):
    NONE = "none"
    SUBSTITUTED = "substituted"
    NETWORK_MAPPED = "network"


@dataclass(frozen=True)
class Redirection:
    kind: RedirectionKind = RedirectionKind.NONE
    target: str|None = None

    @property
    def substitution(self) -> str|None:
        return self.target if self.kind is RedirectionKind.SUBSTITUTED else None

    @property
    def network_mapping(self) -> str|None:
        return self.target if self.kind is RedirectionKind.NETWORK_MAPPED else None


@dataclass(frozen=True)
class Capacity:
    bytes_total: int
    bytes_free: int

    @property
    def percent_free(self) -> float|None:
        """Free space as a percentage, None for a zero-sized volume."""
        if self.bytes_total == 0:
            return None
        return 100.0 * self.bytes_free / self.bytes_total


@dataclass
class RawFacts:
    """
    Results of the individual volume queries for one drive, as the adapter got them.
    None marks a fact that could not be obtained.
    """
    drive_type: int|None = None
    volume_info_ok: bool = False
    label: str|None = None
    serial_number: int|None = None
    max_component_length: int|None = None
    filesystem: str|None = None
    flags: int|None = None
    volume_name: str|None = None
    substitution: str|None = None
    network_mapping: str|None = None
    free_space: tuple[int, int]|None = None  # (total, free)


@dataclass(frozen=True)
class DriveRecord:
    letter: str
    kind: DriveKind
    volume: VolumeInfo|None
    volume_name: str|None
    redirection: Redirection
    capacity: Capacity|None

    @property
    def drive(self) -> str:
        return f"{self.letter}:"


def resolve_redirection(substitution: str|None, network_mapping: str|None) -> Redirection:
    """A substitution wins over a network mapping; only one is ever reported."""
    if substitution:
        return Redirection(RedirectionKind.SUBSTITUTED, substitution)
    if network_mapping:
        return Redirection(RedirectionKind.NETWORK_MAPPED, network_mapping)
    return Redirection()


def build_drive_record(letter: str, raw: RawFacts) -> DriveRecord:
    """Normalizes the raw facts for one drive. Never raises for missing facts."""
    letter = letter[:1].upper()

    volume = None
    if raw.volume_info_ok:
        volume = VolumeInfo(
            label=raw.label or "",
            serial_number=(raw.serial_number or 0) & 0xFFFFFFFF,
            max_component_length=raw.max_component_length or 0,
            filesystem=raw.filesystem or "",
            flags=(raw.flags or 0) & 0xFFFFFFFF,
        )

    capacity = None
    if raw.free_space is not None:
        total, free = raw.free_space
        capacity = Capacity(bytes_total=int(total), bytes_free=int(free))

    return DriveRecord(
        letter=letter,
        kind=DriveKind.from_code(raw.drive_type),
        volume=volume,
        volume_name=raw.volume_name or None,
        redirection=resolve_redirection(raw.substitution, raw.network_mapping),
        capacity=capacity,
    )


@dataclass(frozen=True)
class DriveSources:
    """Run-wide lookup tables, gathered once before any drive is queried."""
    letters: tuple[str, ...] = ()
    substitutions: dict[str, str]|None = None
    connections: dict[str, str]|None = None
    volume_names: dict[str, str]|None = None

    def is_valid(self, letter: str) -> bool:
        return letter in self.letters


def letters_from_bitmask(mask: int) -> tuple[str, ...]:
    """Drive letters whose bit is set in a GetLogicalDrives() mask, in ascending order."""
    return tuple(letter for index, letter in enumerate(DRIVE_LETTERS) if mask & (1 << index))


def parse_drive_argument(value: str) -> str|None:
    """Accepts `X`, or `X:` followed by anything (`C:\\`, `c:foo`). Returns the upper-case letter or None."""
    if not value or value[0].upper() not in DRIVE_LETTERS:
        return None
    if len(value) > 1 and value[1] != ":":
        return None
    return value[0].upper()
