import logging
import secrets
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Debug log of each request with its duration and a request id.

    The id is taken from the incoming ``X-Request-ID`` header when present
    and echoed back on the response.
    """

    def __init__(self, app, logger_name: str = "whentomeet.http"):
        super().__init__(app)
        self._logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or secrets.token_hex(6)
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        self._logger.debug("request start id=%s method=%s path=%s", request_id, method, path)
        try:
            response: Response = await call_next(request)
        except Exception as e:
            dur_ms = int((time.perf_counter() - start) * 1000)
            self._logger.warning("request error id=%s method=%s path=%s dur_ms=%s err=%r",
                                 request_id, method, path, dur_ms, e)
            raise
        dur_ms = int((time.perf_counter() - start) * 1000)
        self._logger.debug("request end id=%s method=%s path=%s status=%s dur_ms=%s",
                           request_id, method, path, response.status_code, dur_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
