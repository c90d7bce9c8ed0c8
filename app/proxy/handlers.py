from fastapi import Request
from fastapi.responses import JSONResponse

from app.logging.logger import Log
from app.proxy.exceptions import ProxyError


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    """Render a ProxyError as ``{status, error, message, code, details}``."""
    Log.error(
        "proxy.request.failed",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(exc.to_envelope(), status_code=exc.status_code)
