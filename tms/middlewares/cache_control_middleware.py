import hashlib

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class CacheControlMiddleware(BaseHTTPMiddleware):
    """
    Keeps browsers and proxies from caching back-office data, and tags
    GET responses with a content hash ETag so an unchanged payload answers 304.
    """

    # Routes whose responses carry user data
    PROTECTED_PREFIXES = [
        "/auth",
        "/users",
        "/complaints",
        "/expenses",
        "/staff-expenses",
    ]

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not any(path == prefix or path.startswith(prefix + "/") for prefix in self.PROTECTED_PREFIXES):
            return await call_next(request)

        response = await call_next(request)

        if request.method != "GET" or response.status_code != 200:
            response.headers.update(NO_CACHE_HEADERS)
            return response

        body = b""
        async for chunk in response.body_iterator:
            body += chunk

        etag = '"0' + hashlib.md5(body, usedforsecurity=False).hexdigest() + '"'
        headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
        headers.update(NO_CACHE_HEADERS)
        headers["ETag"] = etag

        if request.headers.get("If-None-Match") == etag:
            return Response(status_code=304, headers={k: v for k, v in headers.items() if k.lower() != "content-type"})

        return Response(content=body, status_code=response.status_code, headers=headers, media_type=response.media_type)
