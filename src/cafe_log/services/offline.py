"""Offline caching rules rendered into the browser service worker.

Only static, user-independent files are ever precached or served from a
cache. Journal pages are rendered per user behind the session guard, so they
always go to the network and fall back to the static offline page.
"""

from dataclasses import dataclass

CACHE_FIRST = "cache-first"
NETWORK_FIRST = "network-first"
STALE_WHILE_REVALIDATE = "stale-while-revalidate"
NETWORK_ONLY = "network-only"


@dataclass(frozen=True)
class CacheRoute:
    """A caching strategy and the requests it applies to."""

    strategy: str
    paths: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()
    accept: str | None = None

    def matches(self, path: str, accept: str = "") -> bool:
        if path in self.paths or path.startswith(self.prefixes):
            return True
        return self.accept is not None and self.accept in accept

    def as_dict(self) -> dict[str, object]:
        return {
            "strategy": self.strategy,
            "paths": list(self.paths),
            "prefixes": list(self.prefixes),
            "accept": self.accept,
        }


@dataclass(frozen=True)
class OfflineManifest:
    """Cache names, precached assets and routing table of the service worker."""

    version: str = "cafe-log-v2"
    offline_page: str = "/offline"
    core_assets: tuple[str, ...] = (
        "/offline",
        "/manifest.json",
        "/icons/icon-192.png",
        "/icons/icon-512.png",
    )
    asset_prefixes: tuple[str, ...] = ("/static/", "/icons/")
    api_prefixes: tuple[str, ...] = ("/api/",)
    login_path: str = "/login"

    @property
    def core_cache(self) -> str:
        return f"{self.version}-core"

    @property
    def runtime_cache(self) -> str:
        return f"{self.version}-runtime"

    @property
    def routes(self) -> tuple[CacheRoute, ...]:
        """Routes in match order; unmatched requests are network-only."""
        return (
            CacheRoute(CACHE_FIRST, paths=self.core_assets),
            CacheRoute(STALE_WHILE_REVALIDATE, prefixes=self.asset_prefixes),
            CacheRoute(
                NETWORK_FIRST, prefixes=self.api_prefixes, accept="application/json"
            ),
        )

    def strategy_for(self, path: str, accept: str = "") -> str:
        """Pick the caching strategy for a same-origin GET."""
        for route in self.routes:
            if route.matches(path, accept):
                return route.strategy
        return NETWORK_ONLY

    def worker_config(self) -> dict[str, object]:
        """Values embedded in ``/sw.js``."""
        return {
            "version": self.version,
            "coreCache": self.core_cache,
            "runtimeCache": self.runtime_cache,
            "coreAssets": list(self.core_assets),
            "offlinePage": self.offline_page,
            "loginPath": self.login_path,
            "routes": [route.as_dict() for route in self.routes],
        }
