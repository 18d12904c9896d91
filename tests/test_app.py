"""End-to-end tests for the ASGI application."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from routekit import App, AppConfig, JSONResponse, RegistrationClosed, Request, Response, __version__

# =====================================================================
# Version
# =====================================================================


def test_version() -> None:
    assert __version__ is not None
    assert isinstance(__version__, str)


# =====================================================================
# Helpers
# =====================================================================


def _make_client(app: App) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    )


# =====================================================================
# Dispatch
# =====================================================================


@pytest.mark.asyncio
async def test_simple_get() -> None:
    app = App()

    @app.get("/hello")
    async def hello(request: Request) -> JSONResponse:
        return JSONResponse({"msg": "hi"})

    async with _make_client(app) as client:
        resp = await client.get("/hello")
        assert resp.status_code == 200
        assert resp.json() == {"msg": "hi"}


@pytest.mark.asyncio
async def test_path_params_passed_as_strings() -> None:
    app = App()

    @app.get("/profiles/{id}")
    async def show(request: Request, id: str) -> JSONResponse:
        return JSONResponse({"id": id, "params": request.path_params})

    async with _make_client(app) as client:
        resp = await client.get("/profiles/42")
        assert resp.status_code == 200
        assert resp.json() == {"id": "42", "params": {"id": "42"}}

        resp = await client.get("/profiles/42/")
        assert resp.status_code == 200
        assert resp.json()["id"] == "42"


@pytest.mark.asyncio
async def test_handler_without_request_parameter() -> None:
    app = App()

    @app.get("/profiles/{id}/settings")
    async def settings(id: str) -> dict:
        return {"settings_for": id}

    async with _make_client(app) as client:
        resp = await client.get("/profiles/7/settings")
        assert resp.json() == {"settings_for": "7"}


@pytest.mark.asyncio
async def test_kwargs_handler_receives_all_variables() -> None:
    app = App()

    @app.get("/orgs/{org}/repos/{repo}")
    async def repo(**path_params: str) -> dict:
        return path_params

    async with _make_client(app) as client:
        resp = await client.get("/orgs/acme/repos/routekit")
        assert resp.json() == {"org": "acme", "repo": "routekit"}


@pytest.mark.asyncio
async def test_first_registered_route_wins() -> None:
    app = App()

    @app.get("/profiles/settings")
    async def settings() -> dict:
        return {"route": "settings"}

    @app.get("/profiles/{id}")
    async def show(id: str) -> dict:
        return {"route": "show", "id": id}

    async with _make_client(app) as client:
        assert (await client.get("/profiles/settings")).json() == {"route": "settings"}
        assert (await client.get("/profiles/3")).json() == {"route": "show", "id": "3"}


@pytest.mark.asyncio
async def test_route_with_several_methods() -> None:
    app = App()

    @app.route("/profiles", methods=("GET", "POST"))
    async def profiles(request: Request) -> dict:
        return {"method": request.method}

    async with _make_client(app) as client:
        assert (await client.get("/profiles")).json() == {"method": "GET"}
        assert (await client.post("/profiles")).json() == {"method": "POST"}
        assert (await client.put("/profiles")).status_code == 405


@pytest.mark.asyncio
async def test_handler_registered_on_router_directly() -> None:
    app = App()

    async def show(request: Request, id: str) -> dict:
        return {"id": id, "path": request.path}

    def settings(id: str) -> dict:
        return {"settings_for": id}

    app.router.register("/profiles/{id}", "GET", show)
    app.router.register("/profiles/{id}/settings", "GET", settings)

    async with _make_client(app) as client:
        resp = await client.get("/profiles/1")
        assert resp.status_code == 200
        assert resp.json() == {"id": "1", "path": "/profiles/1"}

        resp = await client.get("/profiles/1/settings")
        assert resp.status_code == 200
        assert resp.json() == {"settings_for": "1"}


# =====================================================================
# Fallbacks
# =====================================================================


@pytest.mark.asyncio
async def test_404() -> None:
    app = App()

    async with _make_client(app) as client:
        resp = await client.get("/nope")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Not Found"


@pytest.mark.asyncio
async def test_405_with_allow_header() -> None:
    app = App()

    @app.get("/profiles/{id}")
    async def show(id: str) -> dict:
        return {"id": id}

    @app.delete("/profiles/{id}")
    async def remove(id: str) -> dict:
        return {"deleted": id}

    async with _make_client(app) as client:
        resp = await client.post("/profiles/42")
        assert resp.status_code == 405
        assert resp.json() == {"detail": "Method Not Allowed"}
        assert resp.headers["allow"] == "DELETE, GET"


@pytest.mark.asyncio
async def test_custom_fallbacks() -> None:
    seen: list[dict] = []

    async def not_found(request: Request) -> Response:
        return Response(f"nothing at {request.path}", status_code=404)

    def method_not_allowed(request: Request, **path_params: str) -> Response:
        seen.append(path_params)
        return Response("nope", status_code=405)

    app = App(not_found=not_found, method_not_allowed=method_not_allowed)

    @app.get("/profiles/{id}")
    async def show(id: str) -> dict:
        return {"id": id}

    async with _make_client(app) as client:
        resp = await client.get("/missing")
        assert resp.status_code == 404
        assert resp.text == "nothing at /missing"

        resp = await client.patch("/profiles/1")
        assert resp.status_code == 405
        assert resp.text == "nope"

    assert seen == [{}]


# =====================================================================
# Handler results and errors
# =====================================================================


@pytest.mark.asyncio
async def test_500_on_handler_error() -> None:
    app = App()

    @app.get("/boom")
    async def boom(request: Request) -> Response:
        raise RuntimeError("kaboom")

    async with _make_client(app) as client:
        resp = await client.get("/boom")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal Server Error"}


@pytest.mark.asyncio
async def test_500_includes_traceback_in_debug() -> None:
    app = App(debug=True)

    @app.get("/boom")
    async def boom() -> Response:
        raise RuntimeError("kaboom")

    async with _make_client(app) as client:
        resp = await client.get("/boom")
        assert resp.status_code == 500
        assert "kaboom" in resp.json()["traceback"]


@pytest.mark.asyncio
async def test_handler_error_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    app = App()

    @app.get("/boom")
    async def boom() -> Response:
        raise RuntimeError("kaboom")

    with caplog.at_level("ERROR", logger="routekit.app"):
        async with _make_client(app) as client:
            await client.get("/boom")

    assert "Unhandled error in handler for GET /boom" in caplog.text


@pytest.mark.asyncio
async def test_sync_handler() -> None:
    app = App()

    @app.get("/sync/{name}")
    def sync_handler(name: str) -> JSONResponse:
        return JSONResponse({"sync": name})

    async with _make_client(app) as client:
        resp = await client.get("/sync/yes")
        assert resp.status_code == 200
        assert resp.json() == {"sync": "yes"}


@pytest.mark.asyncio
async def test_text_return_value() -> None:
    app = App()

    @app.get("/text")
    async def text() -> str:
        return "plain"

    async with _make_client(app) as client:
        resp = await client.get("/text")
        assert resp.text == "plain"
        assert resp.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_post_with_body() -> None:
    app = App()

    @app.post("/echo")
    async def echo(request: Request) -> JSONResponse:
        data = await request.json()
        return JSONResponse(data)

    async with _make_client(app) as client:
        resp = await client.post("/echo", json={"key": "value"})
        assert resp.status_code == 200
        assert resp.json() == {"key": "value"}


@pytest.mark.asyncio
async def test_pydantic_model_response() -> None:
    class Profile(BaseModel):
        id: str
        name: str

    app = App()

    @app.get("/profiles/{id}")
    async def show(id: str) -> Profile:
        return Profile(id=id, name="Ada")

    @app.get("/wrapped/{id}")
    async def wrapped(id: str) -> JSONResponse:
        return JSONResponse({"profile": Profile(id=id, name="Ada")})

    async with _make_client(app) as client:
        assert (await client.get("/profiles/1")).json() == {"id": "1", "name": "Ada"}
        assert (await client.get("/wrapped/2")).json() == {"profile": {"id": "2", "name": "Ada"}}


# =====================================================================
# Registration phase
# =====================================================================


@pytest.mark.asyncio
async def test_first_request_freezes_router() -> None:
    app = App()

    @app.get("/a")
    async def a() -> dict:
        return {}

    async with _make_client(app) as client:
        await client.get("/a")

    assert app.router.frozen
    with pytest.raises(RegistrationClosed):

        @app.get("/b")
        async def b() -> dict:
            return {}


@pytest.mark.asyncio
async def test_lifespan_startup_freezes_router() -> None:
    app = App()
    sent: list[dict] = []
    messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])

    async def receive() -> dict:
        return next(messages)

    async def send(message: dict) -> None:
        sent.append(message)

    await app({"type": "lifespan"}, receive, send)

    assert app.router.frozen
    assert [m["type"] for m in sent] == ["lifespan.startup.complete", "lifespan.shutdown.complete"]


def test_config_takes_precedence() -> None:
    app = App(debug=False, config=AppConfig(debug=True, strict=True))
    assert app.debug
    assert app.strict


def test_config_rejects_bad_port() -> None:
    with pytest.raises(ValueError, match="port"):
        AppConfig(port=0)


def test_config_for_development() -> None:
    config = AppConfig(port=9000).for_development()
    assert config.port == 9000
    assert config.reload
    assert config.log_level == "debug"
    assert config.log_access


# =====================================================================
# All HTTP methods
# =====================================================================


@pytest.mark.asyncio
async def test_all_http_methods() -> None:
    app = App()

    for method_name in ("get", "post", "put", "delete", "patch", "options", "head"):
        decorator = getattr(app, method_name)

        @decorator(f"/{method_name}")
        async def handler(request: Request, _method=method_name) -> JSONResponse:
            return JSONResponse({"method": _method})

    async with _make_client(app) as client:
        for method_name in ("get", "post", "put", "delete", "patch", "options"):
            resp = await getattr(client, method_name)(f"/{method_name}")
            assert resp.status_code == 200
            assert resp.json() == {"method": method_name}

        resp = await client.head("/head")
        assert resp.status_code == 200
