"""
safety_checks.py - Safety Check Module

Provides checks run right before a rename, and the mapping of
OS errors to failure reasons
"""

from pathlib import Path
from typing import Tuple, Optional
import errno
import os


_ERRNO_REASONS = {
    errno.EACCES: "permission denied",
    errno.EPERM: "permission denied",
    errno.EROFS: "read-only filesystem",
    errno.EEXIST: "destination exists",
    errno.ENOTEMPTY: "destination exists",
    errno.EXDEV: "cross-device move",
    errno.ENOENT: "source does not exist",
    errno.ENAMETOOLONG: "name too long",
}


def describe_os_error(e: OSError) -> str:
    """Short failure reason for an OS error"""
    reason = _ERRNO_REASONS.get(e.errno)
    if reason is None:
        return e.strerror or str(e)
    return reason


def same_entry(a: Path, b: Path) -> bool:
    try:
        sa, sb = os.lstat(a), os.lstat(b)
    except OSError:
        return False
    return (sa.st_dev, sa.st_ino) == (sb.st_dev, sb.st_ino)


def check_rename_op(src: Path, dst: Path) -> Tuple[bool, Optional[str]]:
    """
    Check if a single rename operation is safe

    Args:
        src: Source path
        dst: Destination path

    Returns:
        (is_safe, error_reason)
    """
    # Check if source exists (symlinks are renamed, not followed)
    if not os.path.lexists(src):
        return False, "source does not exist"

    # A case-only rename on a case-insensitive filesystem sees itself
    if os.path.lexists(dst) and not same_entry(src, dst):
        return False, "destination exists"

    return True, None

