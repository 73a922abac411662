#!/usr/bin/env python3
"""
Demo script for the response cache and retry layer.

Runs offline against a flaky in-process history provider that rate limits
its first calls, showing backoff, cache hits and cache expiry.
"""

import asyncio
import logging
import time

from chronicle_cache.entities import RetryPolicy
from chronicle_cache.errors import RateLimitedError
from chronicle_cache.repositories import InMemorySessionStore
from chronicle_cache.services import ResponseCache, RetryingInvoker


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


class FlakyProvider:
    """Rate limits the first ``failures`` calls, then answers."""

    model_name = "flaky-demo"

    def __init__(self, failures: int) -> None:
        self._failures = failures
        self.calls = 0

    async def generate_text(self, prompt: str) -> str:
        self.calls += 1
        if self.calls <= self._failures:
            raise RateLimitedError("429 RESOURCE_EXHAUSTED")
        return f"A few paragraphs about: {prompt}"


class DemoClock:
    def __init__(self) -> None:
        self.offset = 0.0

    def __call__(self) -> float:
        return time.time() + self.offset


async def demo_retry_and_cache() -> None:
    """Demonstrate backoff on rate limits followed by a cache hit."""
    print_section("Retry with backoff, then cache")

    provider = FlakyProvider(failures=2)
    clock = DemoClock()
    cache = ResponseCache(store=InMemorySessionStore(), ttl=300, clock=clock)
    invoker = RetryingInvoker(RetryPolicy(initial_backoff_ms=200, jitter_ms=100))
    parts = ["character", "Ancient Rome", "Julius Caesar", "English", False]

    async def fetch() -> str:
        return await cache.with_cache(
            parts,
            lambda: invoker.invoke_with_retry(lambda: provider.generate_text("Julius Caesar")),
        )

    start = time.perf_counter()
    text = await fetch()
    print(f"\n  First call: {text}")
    print(f"  Provider calls: {provider.calls} ({time.perf_counter() - start:.2f}s)")

    start = time.perf_counter()
    await fetch()
    print(f"\n  Second call served from cache in {(time.perf_counter() - start) * 1000:.2f}ms")
    print(f"  Provider calls: {provider.calls}")

    clock.offset += 301
    await fetch()
    print("\n  After the TTL elapsed the entry expired and was regenerated")
    print(f"  Provider calls: {provider.calls}")
    print(f"\n  Stats: {cache.stats.to_dict()}")


async def demo_exhaustion() -> None:
    """Demonstrate a call that stays rate limited."""
    print_section("Retry budget exhausted")

    provider = FlakyProvider(failures=10)
    invoker = RetryingInvoker(RetryPolicy(max_attempts=3, initial_backoff_ms=100, jitter_ms=50))

    try:
        await invoker.invoke_with_retry(lambda: provider.generate_text("Genghis Khan"))
    except RateLimitedError as e:
        print(f"\n  ✗ Gave up after {provider.calls} attempts: {e}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="  %(levelname)s %(name)s: %(message)s")
    asyncio.run(demo_retry_and_cache())
    asyncio.run(demo_exhaustion())


if __name__ == "__main__":
    main()
