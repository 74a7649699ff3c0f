"""
Basic MiddlewareClient Usage Examples

Demonstrates plain requests and a custom middleware.
"""

import asyncio

from http_middleware import MiddlewareClient, middleware


async def basic_get_request():
    """Simple GET request without middlewares."""
    print("\n=== Basic GET Request ===")

    async with MiddlewareClient(base_url="https://jsonplaceholder.typicode.com") as client:
        response = await client.get("/posts/1")

    print(f"Status: {response.status_code}")
    print(f"Data: {response.json()}")


async def post_with_json():
    """POST request with JSON body."""
    print("\n=== POST with JSON ===")

    data = {"title": "My Post", "body": "This is the content", "userId": 1}

    async with MiddlewareClient(base_url="https://jsonplaceholder.typicode.com") as client:
        response = await client.post("/posts", json=data)

    print(f"Status: {response.status_code}")
    print(f"Created: {response.json()}")


async def custom_middleware():
    """Function middleware adding a header to every request."""
    print("\n=== Custom Middleware ===")

    @middleware
    async def add_client_header(context, next):
        context.request.headers["X-Client"] = "examples"
        return await next(context)

    async with MiddlewareClient(
        [add_client_header],
        base_url="https://httpbin.org",
    ) as client:
        response = await client.get("/headers")
        print(f"Middlewares: {client.get_middlewares_order()}")

    print(f"Echoed header: {response.json()['headers'].get('X-Client')}")


async def main():
    await basic_get_request()
    await post_with_json()
    await custom_middleware()


if __name__ == "__main__":
    asyncio.run(main())
