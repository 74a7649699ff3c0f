"""
Stale-while-revalidate caching and request deduplication.
"""

import asyncio
import time

from http_middleware import (
    DedupMiddleware,
    InMemorySwrCache,
    LoggingMiddleware,
    MiddlewareClient,
    SwrMiddleware,
)


async def stale_while_revalidate():
    """Second request is answered from cache while a refresh runs in background."""
    print("\n=== Stale While Revalidate ===")

    swr = SwrMiddleware(cache=InMemorySwrCache())

    async with MiddlewareClient(
        [LoggingMiddleware(log=print), swr],
        base_url="https://jsonplaceholder.typicode.com",
    ) as client:
        start = time.monotonic()
        await client.get("/posts/1")
        print(f"Cold request: {(time.monotonic() - start) * 1000:.0f}ms")

        start = time.monotonic()
        await client.get("/posts/1")
        print(f"Cached request: {(time.monotonic() - start) * 1000:.0f}ms")

        await client.wait_for_background()

    print(f"Stats: {swr.get_stats()}")


async def deduplication():
    """Concurrent identical requests share one network call."""
    print("\n=== Deduplication ===")

    dedup = DedupMiddleware()

    async with MiddlewareClient(
        [dedup, SwrMiddleware(cache=InMemorySwrCache())],
        base_url="https://jsonplaceholder.typicode.com",
    ) as client:
        responses = await asyncio.gather(*(client.get("/users") for _ in range(5)))

    print(f"Responses: {len(responses)}")
    print(f"Stats: {dedup.get_stats()}")


async def main():
    await stale_while_revalidate()
    await deduplication()


if __name__ == "__main__":
    asyncio.run(main())
