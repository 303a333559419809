"""User agent pool and browser-like request headers.

Every outbound request (provider, direct, or proxy) draws a fresh user agent
uniformly from a fixed pool spanning desktop and mobile browsers, so retries
do not share a fingerprint.
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserAgentInfo:
    """User agent with metadata."""
    user_agent: str
    browser: str  # 'chrome', 'firefox', 'safari', 'edge'
    platform: str  # 'windows', 'mac', 'linux', 'ios', 'android'


USER_AGENTS: List[UserAgentInfo] = [
    UserAgentInfo(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36",
        "chrome", "windows",
    ),
    UserAgentInfo(
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
        "Version/16.1 Safari/605.1.15",
        "safari", "mac",
    ),
    UserAgentInfo(
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36",
        "chrome", "linux",
    ),
    UserAgentInfo(
        "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
        "Version/16.0 Mobile/15E148 Safari/604.1",
        "safari", "ios",
    ),
    UserAgentInfo(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
        "firefox", "windows",
    ),
    UserAgentInfo(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
        "edge", "windows",
    ),
    UserAgentInfo(
        "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Mobile Safari/537.36",
        "chrome", "android",
    ),
]

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


class UserAgentPool:
    """Fixed pool of realistic user agents with uniform random rotation."""

    def __init__(self, agents: Optional[List[UserAgentInfo]] = None, rng: Optional[random.Random] = None):
        self._user_agents = list(agents or USER_AGENTS)
        if not self._user_agents:
            raise ValueError("User agent pool cannot be empty")
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._user_agents)

    @property
    def user_agents(self) -> List[str]:
        return [ua.user_agent for ua in self._user_agents]

    def get_random(self) -> str:
        """Get a user agent drawn uniformly from the pool."""
        return self._rng.choice(self._user_agents).user_agent

    def get_stats(self) -> Dict[str, Dict[str, int]]:
        """Get browser and platform distribution of the pool."""
        browsers: Dict[str, int] = {}
        platforms: Dict[str, int] = {}
        for ua in self._user_agents:
            browsers[ua.browser] = browsers.get(ua.browser, 0) + 1
            platforms[ua.platform] = platforms.get(ua.platform, 0) + 1
        return {"browser_distribution": browsers, "platform_distribution": platforms}


def browser_headers(user_agent: str, accept: str = HTML_ACCEPT) -> Dict[str, str]:
    """
    Build browser-like request headers around a user agent.

    No ``br`` in Accept-Encoding: httpx only decodes brotli when the extra is installed.
    """
    return {
        "User-Agent": user_agent,
        "Accept": accept,
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Upgrade-Insecure-Requests": "1",
    }


# Global user agent pool instance
user_agent_pool = UserAgentPool()
