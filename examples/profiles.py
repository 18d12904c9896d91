"""Profiles API: three GET routes answering with a greeting.

Run with ``routekit dev examples/profiles.py`` and try::

    curl localhost:8000/profiles/42/settings
    curl -X DELETE localhost:8000/profiles      # 405
"""

from routekit import App, Response

app = App()


def greeting(template: str):
    def handler(**path_params: str) -> Response:
        return Response(f"Hello from {template} API\n")

    handler.__name__ = handler.__qualname__ = f"hello[{template}]"
    return handler


for template in ("/profiles", "/profiles/{id}", "/profiles/{id}/settings"):
    app.get(template)(greeting(template))


if __name__ == "__main__":
    app.run(dev=True)
