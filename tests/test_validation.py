"""Tests for strict-mode handler signature validation."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from routekit import App, RouteTemplate
from routekit.response import JSONResponse, Response
from routekit.validation import validate_handler_signature

# -- Test models ----------------------------------------------------------


class ProfileModel(BaseModel):
    id: str
    name: str


def _validate(func, template: str = "/x", method: str = "GET") -> None:
    validate_handler_signature(func, RouteTemplate.compile(template), method)


# -- Rule 1: Return type annotation must exist ---------------------------


def test_missing_return_type_raises() -> None:
    def handler(request: object): ...

    with pytest.raises(TypeError, match="Missing return type annotation"):
        _validate(handler)


def test_message_names_handler_and_route() -> None:
    def show_profile(request: object): ...

    with pytest.raises(TypeError, match=r"show_profile' \[GET /profiles/\{id\}\]"):
        _validate(show_profile, "/profiles/{id}")


# -- Rule 2: Return type must be structured -------------------------------


def test_dict_return_type_raises() -> None:
    def handler(request: object) -> dict:
        return {}

    with pytest.raises(TypeError, match="must be a Response subclass or BaseModel subclass"):
        _validate(handler)


def test_basemodel_return_type_ok() -> None:
    def handler(request: object) -> ProfileModel:
        return ProfileModel(id="1", name="a")

    _validate(handler)


def test_json_response_return_type_ok() -> None:
    def handler(request: object) -> JSONResponse:
        return JSONResponse({})

    _validate(handler)


def test_response_return_type_ok() -> None:
    def handler() -> Response:
        return Response()

    _validate(handler)


# -- Rule 3: Path variables reach the handler as typed str ---------------


def test_missing_path_variable_parameter_raises() -> None:
    def handler(request: object) -> Response: ...

    with pytest.raises(TypeError, match="Path variable 'id' has no matching parameter"):
        _validate(handler, "/profiles/{id}")


def test_untyped_path_variable_raises() -> None:
    def handler(request: object, id) -> Response: ...

    with pytest.raises(TypeError, match="no type annotation"):
        _validate(handler, "/profiles/{id}")


def test_non_str_path_variable_raises() -> None:
    def handler(id: int) -> Response: ...

    with pytest.raises(TypeError, match="passed as strings"):
        _validate(handler, "/profiles/{id}")


def test_typed_path_variable_ok() -> None:
    def handler(request: object, id: str) -> Response: ...

    _validate(handler, "/profiles/{id}")


def test_var_keyword_accepts_path_variables() -> None:
    def handler(**path_params: str) -> Response: ...

    _validate(handler, "/orgs/{org}/repos/{repo}")


# -- Rule 4: No parameters the router cannot supply -----------------------


def test_unknown_parameter_raises() -> None:
    def handler(request: object, page: int) -> Response: ...

    with pytest.raises(TypeError, match="'page' is not a path variable"):
        _validate(handler, "/profiles")


def test_defaulted_parameter_ok() -> None:
    def handler(request: object, page: int = 1) -> Response: ...

    _validate(handler, "/profiles")


# -- Strict app ---------------------------------------------------------


def test_strict_app_rejects_before_registering() -> None:
    app = App(strict=True)

    with pytest.raises(TypeError, match="Missing return type annotation"):

        @app.get("/profiles/{id}")
        def no_annotation(id: str):
            return Response()

    assert len(app.router) == 0


def test_strict_app_accepts_valid_handler() -> None:
    app = App(strict=True)

    @app.get("/profiles/{id}")
    def show(id: str) -> ProfileModel:
        return ProfileModel(id=id, name="Ada")

    assert [b.template.raw for b in app.router.bindings] == ["/profiles/{id}"]
