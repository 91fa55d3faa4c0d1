"""Demo app: form login backed by the session, plus API-key access.

Usage (from the project root):
    pip install -e ".[examples]"
    python examples/run.py

Then:
    curl -i -X POST -d "username=ada&password=secret" localhost:8000/login   # 302 -> /profile
    curl -i localhost:8000/api                                               # 401 + WWW-Authenticate
    curl -i -H "X-Api-Key: demo-key" localhost:8000/api                      # 200
"""

import os
from typing import Any

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.routing import Route

from starlette_passport import Authenticator, set_log_level

USERS = {"ada": "secret", "grace": "hopper"}
API_KEYS = {os.environ.get("DEMO_API_KEY", "demo-key"): "reporting-service"}


class FormStrategy:
    name = "form"

    async def authenticate(self, request: Request, actions: Any, options: Any) -> None:
        form = await request.form()
        username, password = form.get("username"), form.get("password")
        if not username or not password:
            actions.fail({"message": "Missing credentials"}, 400)
        elif USERS.get(username) != password:
            actions.fail({"message": "Invalid username or password"})
        else:
            actions.success({"id": username}, {"message": f"Welcome, {username}"})


class ApiKeyStrategy:
    name = "apikey"

    def authenticate(self, request: Request, actions: Any, options: Any) -> None:
        key = request.headers.get("x-api-key")
        if key is None:
            actions.fail('ApiKey realm="demo"')
        elif key in API_KEYS:
            actions.success({"id": API_KEYS[key]}, {"scope": "read"})
        else:
            actions.fail('ApiKey realm="demo", error="invalid_key"', 401)


auth = Authenticator()
auth.use(FormStrategy())
auth.use(ApiKeyStrategy())
auth.serializer(lambda user, request: user["id"])
auth.deserializer(lambda username, request: {"id": username} if username in USERS else None)


@auth.protect("form", success_return_to_or_redirect="/profile", failure_redirect="/login", failure_message=True)
async def login(request: Request) -> PlainTextResponse:
    return PlainTextResponse("unreachable", status_code=500)


async def login_page(request: Request) -> JSONResponse:
    messages = request.session.pop("messages", [])
    return JSONResponse({"login": "POST username and password", "messages": messages})


@auth.protect("session")
async def profile(request: Request) -> PlainTextResponse:
    if not auth.is_authenticated(request):
        request.session["returnTo"] = "/profile"
        return RedirectResponse("/login", status_code=302)
    return PlainTextResponse(f"Hello, {request.user['id']}")


async def logout(request: Request) -> RedirectResponse:
    await auth.logout(request)
    return RedirectResponse("/login", status_code=302)


@auth.protect("apikey", session=False)
async def api(request: Request) -> JSONResponse:
    return JSONResponse({"user": request.user, "auth": request.auth})


app = Starlette(
    routes=[
        Route("/login", login, methods=["POST"]),
        Route("/login", login_page, methods=["GET"]),
        Route("/profile", profile),
        Route("/logout", logout),
        Route("/api", api),
    ],
    middleware=[Middleware(SessionMiddleware, secret_key=os.environ.get("SESSION_SECRET", "change-me"))],
)

if __name__ == "__main__":
    set_log_level(os.environ.get("LOG_LEVEL", "INFO"))
    uvicorn.run(app, host="127.0.0.1", port=8000)
