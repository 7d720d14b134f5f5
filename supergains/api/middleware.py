# supergains/api/middleware.py
from fastapi import FastAPI, Request

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def decorate_response(request: Request, call_next):
        response = await call_next(request)

        #set by the rate_limit dependency, Retry-After only on 429
        state = getattr(request.state, "rate_limit", None)
        if state is not None:
            for name, value in state.headers().items():
                if name == "Retry-After" and response.status_code != 429:
                    continue
                response.headers[name] = value

        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
