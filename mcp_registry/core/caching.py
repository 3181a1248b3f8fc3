from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from mcp_registry.core.config import Settings

NO_STORE = "no-store, no-cache, must-revalidate"


@dataclass(frozen=True)
class PublicCachePolicy:
    """
    Cache-Control for public read endpoints.

    Browsers always revalidate (max-age=0); shared caches serve the payload as
    fresh for `s_maxage` seconds, then stale for `stale_while_revalidate` more
    seconds while refetching in the background.
    """
    s_maxage: int = 300
    stale_while_revalidate: int = 60

    @classmethod
    def from_settings(cls, s: Settings) -> "PublicCachePolicy":
        return cls(
            s_maxage=s.public_cache_s_maxage,
            stale_while_revalidate=s.public_cache_stale_while_revalidate,
        )

    def header_value(self) -> str:
        return (
            f"public, max-age=0, s-maxage={self.s_maxage}, "
            f"stale-while-revalidate={self.stale_while_revalidate}"
        )

    def headers(self) -> dict[str, str]:
        return {"Cache-Control": self.header_value()}


def get_cache_policy(request: Request) -> PublicCachePolicy:
    # Resolved once at startup in create_app()
    return request.app.state.cache_policy
