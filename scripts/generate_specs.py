#!/usr/bin/env python3
"""
Generate JSON Schemas, YAML variants, and OpenAPI from Pydantic models.

Outputs under brandgraphics/specs/ (or the directory given as argv[1]):
 - schemas/*.json (and *.yaml)
 - openapi.yaml and openapi.json
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

try:
    import yaml  # type: ignore
except Exception as exc:  # pragma: no cover
    print("PyYAML is required: pip install pyyaml", file=sys.stderr)
    raise


ROOT = Path(__file__).resolve().parents[1]
SPECS = ROOT / "brandgraphics" / "specs"

sys.path.insert(0, str(ROOT))

from brandgraphics.specs.models import SCHEMA_MODELS  # noqa: E402

# route -> (summary, operationId, request schema file, response schema file)
ROUTES = {
    "/graphics/generate": (
        "Compose one branded graphic and optionally save it to SharePoint",
        "generateGraphic",
        "generate.request.schema.json",
        "generate.response.schema.json",
    ),
    "/graphics/batch": (
        "Compose graphics for every product folder under a brand area",
        "batchGraphics",
        "batch.request.schema.json",
        "batch.response.schema.json",
    ),
    "/listBrandImages": (
        "List product images for a brand / category / product line / folder type",
        "listBrandImages",
        "list_brand_images.request.schema.json",
        "list_brand_images.response.schema.json",
    ),
}


def _component_name(filename: str) -> str:
    return SCHEMA_MODELS[filename].__name__


def write_json_yaml(obj: dict, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    yaml_path = json_path.with_suffix(".yaml")
    with yaml_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False)


def generate_model_schemas(out_dir: Path) -> None:
    for filename, model in SCHEMA_MODELS.items():
        schema = model.model_json_schema()
        write_json_yaml(schema, out_dir / "schemas" / filename)


def build_openapi() -> dict:
    # Inline the model schemas as OpenAPI components
    components = {
        "schemas": {model.__name__: model.model_json_schema() for model in SCHEMA_MODELS.values()}
    }
    error_ref = {"$ref": f"#/components/schemas/{_component_name('error.response.schema.json')}"}

    paths = {}
    for route, (summary, operation_id, request_file, response_file) in ROUTES.items():
        paths[route] = {
            "post": {
                "summary": summary,
                "operationId": operation_id,
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {"$ref": f"#/components/schemas/{_component_name(request_file)}"}
                        }
                    },
                },
                "responses": {
                    "200": {
                        "description": "Success",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": f"#/components/schemas/{_component_name(response_file)}"}
                            }
                        },
                    },
                    "400": {
                        "description": "Validation failure (error.code = bad_request)",
                        "content": {"application/json": {"schema": error_ref}},
                    },
                    "500": {
                        "description": "Configuration, Graph or composition failure (error.code = server_error)",
                        "content": {"application/json": {"schema": error_ref}},
                    },
                },
            }
        }

    return {
        "openapi": "3.0.3",
        "info": {
            "title": "Brand Graphics Functions API",
            "version": "0.1.0",
            "description": "HTTP endpoints exposed by the brand graphics Azure Functions app.",
        },
        "servers": [
            {"url": "http://localhost:7071/api", "description": "Local Functions host"}
        ],
        "paths": paths,
        "components": components,
    }


def generate_openapi(out_dir: Path) -> None:
    write_json_yaml(build_openapi(), out_dir / "openapi.json")


def main(out_dir: Optional[Path] = None) -> None:
    out_dir = out_dir or SPECS
    generate_model_schemas(out_dir)
    generate_openapi(out_dir)
    print(f"Specs generated under {out_dir}")


if __name__ == "__main__":
    main(Path(sys.argv[1]) if len(sys.argv) > 1 else None)
