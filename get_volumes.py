"""
Queries Windows for drive and volume information (pywin32, WMI and mpr.dll).
"""

import ctypes
import logging
from ctypes import wintypes

import pywintypes
import win32api
import win32file
from win32com.client import GetObject

from drive_info import DriveSources, RawFacts, letters_from_bitmask
from system_commands import get_drive_substitutions, get_net_use_connections
from utils import call_with_buffer_retry


NO_ERROR = 0
ERROR_MORE_DATA = 234
NETWORK_NAME_BUFFER = 261  # MAX_PATH + 1

logger = logging.getLogger(__name__)

mpr = ctypes.WinDLL("mpr", use_last_error=True)

WNetGetConnectionW = mpr.WNetGetConnectionW
WNetGetConnectionW.argtypes = [
    wintypes.LPCWSTR,                # lpLocalName
    wintypes.LPWSTR,                 # lpRemoteName
    ctypes.POINTER(wintypes.DWORD),  # lpnLength
]
WNetGetConnectionW.restype = wintypes.DWORD


def get_logical_drives() -> tuple[str, ...]:
    """Letters of the drives Windows currently reports, A to Z."""
    return letters_from_bitmask(win32api.GetLogicalDrives())


def get_volume_names() -> dict[str, str]:
    """Volume GUID paths by drive letter, from a single WMI query."""
    result = {}
    try:
        wmi = GetObject("winmgmts:")
        query = "SELECT DriveLetter, DeviceID FROM Win32_Volume WHERE DriveLetter IS NOT NULL"
        for vol in wmi.ExecQuery(query):
            letter = (vol.DriveLetter or "")[:1].upper()
            if letter and vol.DeviceID:
                result[letter] = vol.DeviceID
    except pywintypes.com_error as e:
        logger.warning("WMI volume query failed: %s", e)
    return result


def get_drive_sources() -> DriveSources:
    """Everything that is looked up once per run rather than once per drive."""
    return DriveSources(
        letters=get_logical_drives(),
        substitutions=get_drive_substitutions(),
        connections=get_net_use_connections(),
        volume_names=get_volume_names(),
    )


def get_network_mapping(letter: str) -> str|None:
    local_name = f"{letter}:"

    def query(size: int) -> tuple[bool, str|None, int]:
        buffer = ctypes.create_unicode_buffer(size)
        length = wintypes.DWORD(size)
        status = WNetGetConnectionW(local_name, buffer, ctypes.byref(length))
        if status == ERROR_MORE_DATA:
            return True, None, length.value
        if status != NO_ERROR:
            logger.debug("%s WNetGetConnection returned %d", local_name, status)
            return False, None, size
        return False, buffer.value, size

    return call_with_buffer_retry(query, NETWORK_NAME_BUFFER)


def query_drive(letter: str, sources: DriveSources) -> RawFacts:
    """Runs every per-drive query. Each failure only leaves its own facts unset."""
    root = f"{letter}:\\"
    raw = RawFacts()

    raw.drive_type = win32file.GetDriveType(root)

    try:
        label, serial, max_component, flags, filesystem = win32api.GetVolumeInformation(root)
    except pywintypes.error as e:
        logger.debug("%s GetVolumeInformation failed: %s", root, e.strerror)
    else:
        raw.volume_info_ok = True
        raw.label = label
        raw.serial_number = serial
        raw.max_component_length = max_component
        raw.flags = flags
        raw.filesystem = filesystem

    try:
        raw.volume_name = win32file.GetVolumeNameForVolumeMountPoint(root)
    except pywintypes.error as e:
        logger.debug("%s GetVolumeNameForVolumeMountPoint failed: %s", root, e.strerror)
        raw.volume_name = (sources.volume_names or {}).get(letter)

    raw.substitution = (sources.substitutions or {}).get(letter)
    if not raw.substitution:
        raw.network_mapping = get_network_mapping(letter)
        if not raw.network_mapping:
            raw.network_mapping = (sources.connections or {}).get(letter)

    try:
        _, total, total_free = win32api.GetDiskFreeSpaceEx(root)
    except pywintypes.error as e:
        logger.debug("%s GetDiskFreeSpaceEx failed: %s", root, e.strerror)
    else:
        raw.free_space = (total, total_free)

    return raw
