"""Browser identification strings rotated across requests."""

import random
from enum import Enum


class Platform(str, Enum):
    """Platform family a user agent belongs to."""

    DESKTOP = "desktop"
    MOBILE = "mobile"


class UserAgent(Enum):
    """Realistic browser user agents, tagged with platform and browser."""

    WINDOWS_CHROME = (
        Platform.DESKTOP,
        "chrome",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    WINDOWS_FIREFOX = (
        Platform.DESKTOP,
        "firefox",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    )
    WINDOWS_EDGE = (
        Platform.DESKTOP,
        "edge",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
    )
    MACOS_CHROME = (
        Platform.DESKTOP,
        "chrome",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    MACOS_SAFARI = (
        Platform.DESKTOP,
        "safari",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    )
    MACOS_FIREFOX = (
        Platform.DESKTOP,
        "firefox",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0",
    )
    LINUX_CHROME = (
        Platform.DESKTOP,
        "chrome",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    LINUX_FIREFOX = (
        Platform.DESKTOP,
        "firefox",
        "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0",
    )
    ANDROID_CHROME = (
        Platform.MOBILE,
        "chrome",
        "Mozilla/5.0 (Linux; Android 14; SM-G991B) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36",
    )
    ANDROID_FIREFOX = (
        Platform.MOBILE,
        "firefox",
        "Mozilla/5.0 (Mobile; rv:121.0) Gecko/121.0 Firefox/121.0",
    )
    IOS_SAFARI = (
        Platform.MOBILE,
        "safari",
        "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1",
    )
    IOS_CHROME = (
        Platform.MOBILE,
        "chrome",
        "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) CriOS/120.0.0.0 Mobile/15E148 Safari/604.1",
    )

    def __init__(self, platform: Platform, browser: str, header_value: str):
        self.platform = platform
        self.browser = browser
        self.header_value = header_value

    def __str__(self) -> str:
        return self.header_value


def random_user_agent(platform: Platform | None = None) -> UserAgent:
    """
    Pick a user agent uniformly at random.

    Args:
        platform: Restrict the pool to one platform family (optional)

    Returns:
        A UserAgent member; call str() on it for the header value
    """
    pool = [agent for agent in UserAgent if platform is None or agent.platform is platform]
    return random.choice(pool)
