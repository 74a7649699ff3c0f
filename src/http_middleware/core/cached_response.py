"""Replayable snapshot of an HTTP response."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import httpx

# Headers describing the wire encoding of the original body. The snapshot
# stores decoded bytes, so these never reach a replay.
_ENCODING_HEADERS = frozenset({"content-encoding", "transfer-encoding"})


@dataclass(frozen=True)
class CachedResponse:
    """Immutable snapshot of an ``httpx.Response`` that can be replayed.

    A streamed ``httpx.Response`` body can be read exactly once.
    ``CachedResponse`` reads it into memory so that :meth:`to_response`
    can build any number of fresh, independently readable responses
    from the same data.

    The body is kept decoded. ``Content-Encoding`` is dropped. The declared
    ``Content-Length`` is kept unless the body was decoded, and a replay
    without a body (HEAD, 304) still carries it.

    Example:
        >>> result = await next(context)
        >>> cached = await CachedResponse.from_response(result.response)
        >>> await cache.set(key, cached)
        >>> return MiddlewareResult.immediate(cached.to_response())

    Memory:
        The whole body is buffered. Backends that store large responses
        should enforce their own size limits.
    """

    status_code: int
    body: bytes
    headers: Tuple[Tuple[str, str], ...] = ()
    reason_phrase: Optional[str] = None
    content_length: Optional[int] = None
    method: Optional[str] = None
    url: Optional[str] = None
    extensions: Tuple[Tuple[str, str], ...] = field(default=(), repr=False)

    @classmethod
    async def from_response(cls, response: httpx.Response) -> "CachedResponse":
        """Snapshot ``response``, consuming its body.

        After this call the original response is closed and its stream is
        exhausted; use :meth:`to_response` to hand out a replacement.
        """
        body = await response.aread()

        declared = response.headers.get("content-length")
        try:
            content_length = int(declared) if declared is not None else None
        except ValueError:
            content_length = None

        # Decoded or unparsable: length is recomputed from the stored body
        drop = set(_ENCODING_HEADERS)
        if "content-encoding" in response.headers or content_length is None:
            drop.add("content-length")

        headers = tuple(
            (name, value)
            for name, value in response.headers.multi_items()
            if name.lower() not in drop
        )

        method = url = None
        try:
            request = response.request
        except RuntimeError:
            # Response built without a request (e.g. in tests)
            request = None
        if request is not None:
            method = request.method
            url = str(request.url)

        http_version = response.extensions.get("http_version")
        extensions = ()
        if isinstance(http_version, bytes):
            extensions = (("http_version", http_version.decode("ascii", "replace")),)

        return cls(
            status_code=response.status_code,
            body=bytes(body),
            headers=headers,
            reason_phrase=response.reason_phrase or None,
            content_length=content_length,
            method=method,
            url=url,
            extensions=extensions,
        )

    def to_response(self) -> httpx.Response:
        """Build a new, unread ``httpx.Response`` from the snapshot.

        Every call returns an independent response object, so this may be
        called any number of times.
        """
        extensions = {name: value.encode("ascii", "replace") for name, value in self.extensions}
        if self.reason_phrase:
            extensions["reason_phrase"] = self.reason_phrase.encode("ascii", "replace")

        request = None
        if self.method and self.url:
            request = httpx.Request(self.method, self.url)

        headers = list(self.headers)
        if not self.body and self.content_length is not None:
            if not any(name.lower() == "content-length" for name, _ in headers):
                headers.append(("content-length", str(self.content_length)))

        return httpx.Response(
            self.status_code,
            headers=headers,
            content=self.body,
            request=request,
            extensions=extensions,
        )

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (invalid bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")

    @property
    def size_in_bytes(self) -> int:
        return len(self.body)

    def __str__(self) -> str:
        names = ", ".join(name for name, _ in self.headers)
        return (
            f"CachedResponse(status: {self.status_code}, "
            f"size: {self.size_in_bytes} bytes, headers: {names})"
        )
