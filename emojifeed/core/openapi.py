"""OpenAPI metadata and customization utilities.

Adds the bearer session security scheme to the create mutation only (reads
are public) and registers tag descriptions.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_AUTHENTICATED_OPERATIONS = {"posts.create"}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "SessionAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Sign-in session token issued by the identity service.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Posts", "description": "Emoji micro-posts and feeds."},
            {"name": "Profiles", "description": "Public author profiles."},
            {"name": "Health", "description": "Liveness checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for methods in schema.get("paths", {}).values():
            for method_obj in methods.values():
                if isinstance(method_obj, dict) and method_obj.get("operationId") in _AUTHENTICATED_OPERATIONS:
                    method_obj["security"] = [{"SessionAuth": []}]

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
