"""Platform profiles and detection."""

from pathconflict.platform.detect import detect_platform, detect_wsl, platform_info
from pathconflict.platform.profile import PlatformKind, PlatformProfile

__all__ = [
    "PlatformKind",
    "PlatformProfile",
    "detect_platform",
    "detect_wsl",
    "platform_info",
]
