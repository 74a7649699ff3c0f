"""
Structured logging and configuration from environment variables.

Environment variables (or a .env file):
    HTTP_MIDDLEWARE_BASE_URL=https://jsonplaceholder.typicode.com
    HTTP_MIDDLEWARE_TIMEOUT_READ=10
    HTTP_MIDDLEWARE_LOG_ENABLED=true
    HTTP_MIDDLEWARE_LOG_FORMAT=json
"""

import asyncio
import os

from http_middleware import LoggingMiddleware, MiddlewareClient, MiddlewareClientConfig
from http_middleware.core.env_config import config_summary, load_from_env
from http_middleware.core.logging import LoggingConfig


async def json_logging():
    """JSON logs with correlation id bound to each request."""
    print("\n=== JSON Logging ===")

    config = LoggingConfig.create(level="INFO", format="json")

    client_config = MiddlewareClientConfig.create(
        base_url="https://jsonplaceholder.typicode.com",
        headers={"Authorization": "Bearer not-logged"},
        logging=config,
    )

    async with MiddlewareClient([LoggingMiddleware(include_headers=True)], config=client_config) as client:
        await client.get("/posts/1")


async def environment_config():
    """Build the client configuration from HTTP_MIDDLEWARE_* variables."""
    print("\n=== Environment Config ===")

    os.environ.setdefault("HTTP_MIDDLEWARE_BASE_URL", "https://jsonplaceholder.typicode.com")
    os.environ.setdefault("HTTP_MIDDLEWARE_TIMEOUT_READ", "10")

    config = load_from_env()
    print(config_summary(config))

    async with MiddlewareClient(config=config) as client:
        response = await client.get("/posts/1")
        print(f"Status: {response.status_code}")


async def main():
    await json_logging()
    await environment_config()


if __name__ == "__main__":
    asyncio.run(main())
