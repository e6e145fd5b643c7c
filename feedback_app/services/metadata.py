"""Client metadata helpers: user-agent parsing and phone numbers."""

import re
from dataclasses import dataclass

_TABLET_RE = re.compile(r"tablet|ipad|playbook|silk", re.IGNORECASE)
_MOBILE_RE = re.compile(r"mobile|android|iphone|ipod|blackberry|windows phone", re.IGNORECASE)

# +234 or 0, then a 7/8/9 network prefix and nine more digits
_NIGERIAN_PHONE_RE = re.compile(r"^(\+234|0)[789]\d{9}$")


@dataclass(frozen=True)
class DeviceInfo:
    """Coarse device classification derived from a user-agent string."""

    device_type: str
    browser: str
    os: str


def detect_device_type(user_agent: str) -> str:
    """Classify as tablet, mobile, desktop, or unknown for an empty UA."""
    if _TABLET_RE.search(user_agent):
        return "tablet"
    if _MOBILE_RE.search(user_agent):
        return "mobile"
    if user_agent:
        return "desktop"
    return "unknown"


def detect_browser(user_agent: str) -> str:
    # Order matters: Edge and Chrome both advertise Chrome/Safari.
    if "Chrome" in user_agent and "Edg" not in user_agent:
        return "Chrome"
    if "Firefox" in user_agent:
        return "Firefox"
    if "Safari" in user_agent and "Chrome" not in user_agent:
        return "Safari"
    if "Edg" in user_agent:
        return "Edge"
    if "Opera" in user_agent or "OPR" in user_agent:
        return "Opera"
    return "Unknown"


def detect_os(user_agent: str) -> str:
    if "Windows" in user_agent:
        return "Windows"
    if "Mac OS" in user_agent and "iPhone" not in user_agent and "iPad" not in user_agent:
        return "macOS"
    if "Android" in user_agent:
        return "Android"
    if "iPhone" in user_agent or "iPad" in user_agent:
        return "iOS"
    if "Linux" in user_agent:
        return "Linux"
    return "Unknown"


def parse_user_agent(user_agent: str | None) -> DeviceInfo:
    """Derive device type, browser and OS from a user-agent string."""
    ua = user_agent or ""
    return DeviceInfo(
        device_type=detect_device_type(ua),
        browser=detect_browser(ua),
        os=detect_os(ua),
    )


def validate_nigerian_phone(phone: str) -> bool:
    """Check a phone number against the +234 / 0 mobile formats."""
    cleaned = re.sub(r"\s+", "", phone)
    return bool(_NIGERIAN_PHONE_RE.match(cleaned))


def normalize_phone(phone: str) -> str:
    """Strip whitespace and rewrite a leading 0 to the +234 country code."""
    cleaned = re.sub(r"\s+", "", phone)
    if cleaned.startswith("0"):
        return "+234" + cleaned[1:]
    return cleaned
