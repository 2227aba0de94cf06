"""OpenAPI schema customization for the rotation API."""

from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from sidrotator.models.errors import ProblemDetail

API_DESCRIPTION = """
# Security Identifier Rotation API

Rotates the Security Identifier stored on a managed device's directory
record once the device proves possession of its certificate.

## Rotation flow

1. **Validate**: DeviceID, SerialNumber, Signature, Thumbprint,
   ExpirationDate and FullPem must all be present
2. **Lookup**: the device record is fetched from the directory
3. **Eligibility**: platform tag and stored expiration dates are checked
4. **Proof of possession**: the certificate thumbprint must match and the
   signature over the record's directory object id must verify
5. **Write**: the new identifier and its expiration are stored

## Responses

Rotation outcomes use short `text/plain` bodies:

| Status | Body |
|--------|------|
| 200 | *(empty)* |
| 400 | `Header validation failed` or `Invalid Request` |
| 403 | `Untrusted request` or `Disabled device record` |
| 502 | `Directory request failed` |

Other errors follow
[RFC 7807 Problem Details](https://datatracker.ietf.org/doc/html/rfc7807).
"""


def custom_openapi(app: FastAPI) -> dict[str, Any]:
    """Generate customized OpenAPI schema for the API.

    Args:
        app: The FastAPI application instance.

    Returns:
        Customized OpenAPI schema dictionary.
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=API_DESCRIPTION,
        routes=app.routes,
    )

    openapi_schema["tags"] = [
        {
            "name": "Health",
            "description": "Health check endpoints for monitoring",
        },
        {
            "name": "security-identifier",
            "description": "Certificate-bound Security Identifier rotation",
        },
    ]

    schemas = openapi_schema.setdefault("components", {}).setdefault("schemas", {})
    problem_schema = ProblemDetail.model_json_schema(
        ref_template="#/components/schemas/{model}"
    )
    schemas.update(problem_schema.pop("$defs", {}))
    schemas["ProblemDetail"] = problem_schema

    problem_response = {
        "content": {
            "application/json": {
                "schema": {"$ref": "#/components/schemas/ProblemDetail"}
            }
        },
    }
    for path in openapi_schema["paths"].values():
        for operation in path.values():
            if isinstance(operation, dict) and "responses" in operation:
                operation["responses"].pop("422", None)
                operation["responses"]["500"] = {
                    "description": "Internal Server Error",
                    **problem_response,
                }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


def configure_openapi(app: FastAPI) -> None:
    """Configure the FastAPI app to use custom OpenAPI schema.

    Args:
        app: The FastAPI application instance.
    """
    app.openapi = lambda: custom_openapi(app)  # type: ignore[method-assign]
