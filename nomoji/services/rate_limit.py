"""Fixed-window rate limiting backed by the KV store.

Counters live under rl:<tier>:<identity> as {"count", "resetAt"} (epoch ms).
The read-modify-write is not atomic: concurrent bursts can overshoot the limit.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from nomoji.config import get_settings
from nomoji.db.session import get_db
from nomoji.services import kv_store
from nomoji.services.kv_store import KVStore, StorageUnavailableError

logger = logging.getLogger(__name__)

RATE_LIMIT_KEY_PREFIX = "rl:"
MIN_COUNTER_TTL_SECONDS = 60


@dataclass(frozen=True)
class RateLimitTier:
    name: str
    max_requests: int
    window_seconds: int = 60


TIERS: dict[str, RateLimitTier] = {
    "strict": RateLimitTier("strict", 60),
    "moderate": RateLimitTier("moderate", 100),
    "relaxed": RateLimitTier("relaxed", 300),
    "writes": RateLimitTier("writes", 20),
}


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at_ms: int
    retry_after: int = 0

    def headers(self) -> dict[str, str]:
        reset = datetime.fromtimestamp(self.reset_at_ms / 1000, tz=UTC)
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": reset.strftime("%Y-%m-%dT%H:%M:%S.")
            + f"{reset.microsecond // 1000:03d}Z",
        }


class RateLimitExceededError(Exception):
    """Raised by the RateLimiter dependency when a client is over its window budget."""

    def __init__(self, decision: RateLimitDecision) -> None:
        super().__init__("Rate limit exceeded. Please try again later.")
        self.decision = decision


def client_identity(request: Request) -> str:
    """user:<id> for per-user routes, else ip:<client address>, else anonymous."""
    user_id = request.path_params.get("user_id")
    if user_id:
        return f"user:{user_id}"
    ip = request.headers.get("cf-connecting-ip")
    if not ip:
        forwarded = request.headers.get("x-forwarded-for", "")
        ip = forwarded.split(",")[0].strip()
    if not ip and request.client is not None:
        ip = request.client.host
    return f"ip:{ip}" if ip else "anonymous"


def counter_key(tier: RateLimitTier, identity: str) -> str:
    return f"{RATE_LIMIT_KEY_PREFIX}{tier.name}:{identity}"


def consume(store: KVStore, tier: RateLimitTier, identity: str) -> RateLimitDecision:
    """Count one request against identity's window in tier.

    Raises StorageUnavailableError if the counter cannot be read or written.
    """
    now_ms = int(kv_store.utcnow().timestamp() * 1000)
    key = counter_key(tier, identity)
    state = store.get_json(key)

    if not isinstance(state, dict) or now_ms > int(state["resetAt"]):
        state = {"count": 1, "resetAt": now_ms + tier.window_seconds * 1000}
    elif int(state["count"]) >= tier.max_requests:
        retry_after = math.ceil((int(state["resetAt"]) - now_ms) / 1000)
        return RateLimitDecision(
            allowed=False,
            limit=tier.max_requests,
            remaining=0,
            reset_at_ms=int(state["resetAt"]),
            retry_after=retry_after,
        )
    else:
        state = {"count": int(state["count"]) + 1, "resetAt": int(state["resetAt"])}

    ttl = max(MIN_COUNTER_TTL_SECONDS, math.ceil((state["resetAt"] - now_ms) / 1000) + 10)
    store.put_json(key, state, ttl_seconds=ttl)
    return RateLimitDecision(
        allowed=True,
        limit=tier.max_requests,
        remaining=tier.max_requests - state["count"],
        reset_at_ms=state["resetAt"],
    )


class RateLimiter:
    """FastAPI dependency enforcing one tier.

    Allowed requests leave their X-RateLimit-* headers on request.state for the
    observability middleware to copy onto the response. A later tier in the
    same request overwrites an earlier one's headers.
    """

    def __init__(self, tier: RateLimitTier) -> None:
        self.tier = tier

    def __call__(self, request: Request, db: Session = Depends(get_db)) -> None:
        settings = get_settings()
        if not settings.rate_limit_enabled or settings.profile.rate_limit_bypass:
            return

        identity = client_identity(request)
        try:
            decision = consume(KVStore(db), self.tier, identity)
        except (StorageUnavailableError, KeyError, TypeError, ValueError):
            logger.exception(
                "Rate limiting error, allowing request: tier=%s identity=%s",
                self.tier.name,
                identity,
            )
            return

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded: tier=%s identity=%s retry_after=%d",
                self.tier.name,
                identity,
                decision.retry_after,
            )
            raise RateLimitExceededError(decision)
        request.state.rate_limit_headers = decision.headers()


strict_limit = RateLimiter(TIERS["strict"])
moderate_limit = RateLimiter(TIERS["moderate"])
relaxed_limit = RateLimiter(TIERS["relaxed"])
write_limit = RateLimiter(TIERS["writes"])
