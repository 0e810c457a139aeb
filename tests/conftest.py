import copy
import json
from typing import Any

import httpx
import pytest

ACCESS_TOKEN = "figd_test-token"


SAMPLE_SYSTEM: dict[str, Any] = {
    "systemId": "acme-ds",
    "systemName": "Acme Design System",
    "version": "3.2.0",
    "dimensions": [
        {
            "id": "scheme",
            "displayName": "Color Scheme",
            "defaultMode": "light",
            "modes": [{"id": "light", "name": "Light"}, {"id": "dark", "name": "Dark"}],
        },
        {
            "id": "contrast",
            "displayName": "Contrast",
            "defaultMode": "regular",
            "modes": [
                {"id": "low", "name": "Low"},
                {"id": "regular", "name": "Regular"},
                {"id": "high", "name": "High"},
            ],
        },
    ],
    "dimensionOrder": ["scheme", "contrast"],
    "tokenCollections": [
        {"id": "color", "name": "Color", "resolvedValueTypeIds": ["color"]},
        {"id": "space", "name": "Spacing", "resolvedValueTypeIds": ["dimension"]},
    ],
    "resolvedValueTypes": [
        {"id": "color", "displayName": "Color", "type": "COLOR"},
        {"id": "dimension", "displayName": "Dimension", "type": "DIMENSION"},
    ],
    "tokens": [
        {
            "id": "blue-500",
            "displayName": "Blue 500",
            "resolvedValueTypeId": "color",
            "propertyTypes": ["background-color"],
            "valuesByMode": [{"modeIds": [], "value": {"value": "#0055FF"}}],
        },
        {
            "id": "surface",
            "displayName": "Surface",
            "resolvedValueTypeId": "color",
            "propertyTypes": ["background-color"],
            "valuesByMode": [
                {"modeIds": ["light"], "value": {"value": "#FFFFFF"}},
                {"modeIds": ["dark"], "value": {"value": "#111111"}},
            ],
        },
        {
            "id": "text-primary",
            "displayName": "Text Primary",
            "resolvedValueTypeId": "color",
            "propertyTypes": ["text-color"],
            "valuesByMode": [
                {"modeIds": ["light", "regular"], "value": {"value": "#333333"}},
                {"modeIds": ["light", "high"], "value": {"value": "#000000"}},
                {"modeIds": ["dark", "regular"], "value": {"value": "#DDDDDD"}},
                {"modeIds": ["dark", "high"], "value": {"value": "#FFFFFF"}},
                {"modeIds": ["light"], "value": {"tokenId": "blue-500"}},
            ],
        },
        {
            "id": "space-md",
            "displayName": "Space MD",
            "resolvedValueTypeId": "dimension",
            "propertyTypes": ["gap-spacing"],
            "valuesByMode": [{"modeIds": [], "value": {"value": "16px"}}],
        },
    ],
}


@pytest.fixture
def sample_system() -> dict[str, Any]:
    """A fresh, mutable copy of a two-dimension token system."""
    return copy.deepcopy(SAMPLE_SYSTEM)


class FakeFigmaServer:
    """
    Stateful stand-in for the Figma Variables REST endpoints.

    Assigns real ids to created entities, applies renames, and answers
    with the same envelope shape as the live API.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Any]] = {}
        self.variables: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.pushed: list[dict[str, Any]] = []
        self.fail_with: int | None = None
        self.fail_on: str | None = None
        self._counter = 0

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("X-Figma-Token") != ACCESS_TOKEN:
            return httpx.Response(
                403, json={"status": 403, "error": True, "message": "Invalid token"}
            )
        if self.fail_with is not None and self.fail_on in (None, request.method):
            return httpx.Response(
                self.fail_with,
                json={"status": self.fail_with, "error": True, "message": "Simulated failure"},
                headers={"Retry-After": "7"} if self.fail_with == 429 else None,
            )

        if request.method == "GET" and request.url.path.endswith("/variables/local"):
            return httpx.Response(
                200,
                json={
                    "status": 200,
                    "error": False,
                    "meta": {
                        "variables": copy.deepcopy(self.variables),
                        "variableCollections": copy.deepcopy(self.collections),
                    },
                },
            )
        if request.method == "POST" and request.url.path.endswith("/variables"):
            body = json.loads(request.content)
            self.pushed.append(body)
            return httpx.Response(
                200,
                json={
                    "status": 200,
                    "error": False,
                    "meta": {"tempIdToRealId": self._apply(body)},
                },
            )
        return httpx.Response(404, json={"status": 404, "error": True, "message": "Not found"})

    def _apply(self, body: dict[str, Any]) -> dict[str, str]:
        temp_to_real: dict[str, str] = {}

        def real(entity_id: str) -> str:
            return temp_to_real.get(entity_id, entity_id)

        for collection in body.get("variableCollections", []):
            if collection["action"] == "CREATE":
                collection_id = self._next("VariableCollectionId:1:")
                mode_id = self._next("1:")
                temp_to_real[collection["id"]] = collection_id
                temp_to_real[collection["initialModeId"]] = mode_id
                self.collections[collection_id] = {
                    "id": collection_id,
                    "name": collection["name"],
                    "defaultModeId": mode_id,
                    "modes": [{"modeId": mode_id, "name": "Mode 1"}],
                    "hiddenFromPublishing": collection.get("hiddenFromPublishing", False),
                }
            else:
                self.collections[collection["id"]]["name"] = collection["name"]

        for mode in body.get("variableModes", []):
            collection = self.collections[real(mode["variableCollectionId"])]
            if mode["action"] == "CREATE":
                mode_id = self._next("1:")
                temp_to_real[mode["id"]] = mode_id
                collection["modes"].append({"modeId": mode_id, "name": mode["name"]})
            else:
                for existing in collection["modes"]:
                    if existing["modeId"] == real(mode["id"]):
                        existing["name"] = mode["name"]

        for variable in body.get("variables", []):
            if variable["action"] == "CREATE":
                variable_id = self._next("VariableID:1:")
                temp_to_real[variable["id"]] = variable_id
                self.variables[variable_id] = {
                    "id": variable_id,
                    "name": variable["name"],
                    "variableCollectionId": real(variable["variableCollectionId"]),
                    "resolvedType": variable["resolvedType"],
                }
            else:
                self.variables[variable["id"]]["name"] = variable["name"]

        return temp_to_real


@pytest.fixture
def figma_server() -> FakeFigmaServer:
    return FakeFigmaServer()


@pytest.fixture
def access_token() -> str:
    return ACCESS_TOKEN
