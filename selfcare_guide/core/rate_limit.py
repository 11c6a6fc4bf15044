"""
Rate limiting module for IP-based request throttling.
Counts requests per client key inside a fixed 60 second window.

Window records live in a pluggable store: the default keeps them in process
memory, the Supabase store shares them across instances.
"""

import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Protocol

from supabase import Client, PostgrestAPIError

from selfcare_guide.config import (
    RATE_LIMIT_BACKEND,
    RATE_LIMIT_REQUESTS_PER_MINUTE,
    RATE_LIMIT_WINDOW_MS,
    SUPABASE_SERVICE_KEY,
    SUPABASE_URL,
    logger,
)

UNKNOWN_CLIENT = "unknown"
RATE_LIMIT_TABLE = "rate_limit_windows"

ANALYSIS_LIMIT = RATE_LIMIT_REQUESTS_PER_MINUTE
COMPENDIUM_LIMIT = RATE_LIMIT_REQUESTS_PER_MINUTE * 2

# Lost compare-and-set races before a request is refused
MAX_CAS_ATTEMPTS = 5


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimitRecord:
    client_key: str
    count: int
    window_reset_at: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    count: int

    def __bool__(self) -> bool:
        return self.allowed

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }


class RateLimitStore(Protocol):
    def get(self, key: str) -> Optional[RateLimitRecord]: ...

    def set(self, key: str, record: RateLimitRecord) -> None: ...

    def compare_and_set(
        self,
        key: str,
        expected: Optional[RateLimitRecord],
        new: RateLimitRecord,
    ) -> bool: ...


class InMemoryRateLimitStore:
    """Process-local store. Lost on restart, not shared between instances."""

    def __init__(self) -> None:
        self._records: Dict[str, RateLimitRecord] = {}

    def get(self, key: str) -> Optional[RateLimitRecord]:
        return self._records.get(key)

    def set(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = record

    def compare_and_set(
        self,
        key: str,
        expected: Optional[RateLimitRecord],
        new: RateLimitRecord,
    ) -> bool:
        if self._records.get(key) != expected:
            return False
        self._records[key] = new
        return True

    def clear(self) -> None:
        self._records.clear()


# Initialize Supabase client
_supabase_client: Optional[Client] = None


def _get_supabase_client() -> Client:
    """
    Get or create the Supabase client instance.

    Returns:
        Client: Supabase client instance

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_SERVICE_KEY is not configured
    """
    global _supabase_client

    if _supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
            error_msg = "SUPABASE_URL or SUPABASE_SERVICE_KEY is not configured"
            logger.error(error_msg)
            raise ValueError(error_msg)

        try:
            from supabase import create_client

            _supabase_client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
            logger.info("Supabase client initialized successfully for rate limiting")
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise

    return _supabase_client


class SupabaseRateLimitStore:
    """
    Shared store backed by the ``rate_limit_windows`` table.

    Compare-and-set is a conditional update filtered on the previously read
    values; a first insert that collides with another instance's insert
    counts as a lost race.
    """

    def __init__(
        self, client: Optional[Client] = None, table: str = RATE_LIMIT_TABLE
    ) -> None:
        self._client = client
        self._table = table

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = _get_supabase_client()
        return self._client

    def get(self, key: str) -> Optional[RateLimitRecord]:
        response = (
            self.client.table(self._table)
            .select("client_key, count, window_reset_at")
            .eq("client_key", key)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        if not rows:
            return None
        row = rows[0]
        return RateLimitRecord(
            client_key=row["client_key"],
            count=int(row["count"]),
            window_reset_at=int(row["window_reset_at"]),
        )

    def set(self, key: str, record: RateLimitRecord) -> None:
        self.client.table(self._table).upsert(self._row(key, record)).execute()

    def compare_and_set(
        self,
        key: str,
        expected: Optional[RateLimitRecord],
        new: RateLimitRecord,
    ) -> bool:
        if expected is None:
            try:
                self.client.table(self._table).insert(self._row(key, new)).execute()
            except PostgrestAPIError as exc:
                logger.debug(
                    "Rate limit insert lost race",
                    extra={"client_key": key, "error": str(exc)},
                )
                return False
            return True

        response = (
            self.client.table(self._table)
            .update({"count": new.count, "window_reset_at": new.window_reset_at})
            .eq("client_key", key)
            .eq("count", expected.count)
            .eq("window_reset_at", expected.window_reset_at)
            .execute()
        )
        return bool(response.data)

    @staticmethod
    def _row(key: str, record: RateLimitRecord) -> dict:
        return {
            "client_key": key,
            "count": record.count,
            "window_reset_at": record.window_reset_at,
        }


class RateLimiter:
    """Fixed-window request counter for one endpoint."""

    def __init__(
        self,
        name: str,
        limit: int,
        window_ms: int = RATE_LIMIT_WINDOW_MS,
        store: Optional[RateLimitStore] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.name = name
        self.limit = limit
        self.window_ms = window_ms
        self.store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock or _now_ms

    def _key(self, client_key: Optional[str]) -> str:
        return f"{self.name}:{client_key or UNKNOWN_CLIENT}"

    def check_rate_limit(self, client_key: Optional[str]) -> RateLimitDecision:
        """
        Count one request for ``client_key`` and report whether it may proceed.

        A denied request leaves the stored record untouched.
        """
        key = self._key(client_key)

        for _ in range(MAX_CAS_ATTEMPTS):
            now = self._clock()
            current = self.store.get(key)

            if current is None or now > current.window_reset_at:
                fresh = RateLimitRecord(
                    client_key=key, count=1, window_reset_at=now + self.window_ms
                )
                if self.store.compare_and_set(key, current, fresh):
                    return self._decision(True, fresh)
                continue

            if current.count >= self.limit:
                logger.warning(
                    "Rate limit exceeded",
                    extra={
                        "limiter": self.name,
                        "client_key": key,
                        "count": current.count,
                        "limit": self.limit,
                    },
                )
                return self._decision(False, current)

            bumped = replace(current, count=current.count + 1)
            if self.store.compare_and_set(key, current, bumped):
                return self._decision(True, bumped)

        logger.warning(
            "Rate limit store contention, refusing request",
            extra={"limiter": self.name, "client_key": key},
        )
        return RateLimitDecision(
            allowed=False,
            limit=self.limit,
            remaining=0,
            reset_at=self._clock() + self.window_ms,
            count=self.limit,
        )

    def is_allowed(self, client_key: Optional[str]) -> bool:
        return self.check_rate_limit(client_key).allowed

    def _decision(self, allowed: bool, record: RateLimitRecord) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=allowed,
            limit=self.limit,
            remaining=max(0, self.limit - record.count),
            reset_at=record.window_reset_at,
            count=record.count,
        )


def build_rate_limit_store(backend: str = RATE_LIMIT_BACKEND) -> RateLimitStore:
    """Return the store selected by RATE_LIMIT_BACKEND."""
    if backend == "supabase":
        logger.info("Using Supabase rate limit store")
        return SupabaseRateLimitStore()
    if backend != "memory":
        logger.warning(f"Unknown RATE_LIMIT_BACKEND '{backend}', using memory")
    return InMemoryRateLimitStore()


_store = build_rate_limit_store()

analysis_limiter = RateLimiter("analysis", ANALYSIS_LIMIT, store=_store)
compendium_limiter = RateLimiter("compendium", COMPENDIUM_LIMIT, store=_store)
