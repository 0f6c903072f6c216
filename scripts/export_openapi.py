#!/usr/bin/env python
"""Export FastAPI OpenAPI schema to openapi.yaml at the repository root."""

from __future__ import annotations

from pathlib import Path

import yaml

from shopping_assistant.core.config import Settings
from shopping_assistant.main import create_app


def main() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    output_path = repo_root / "openapi.yaml"

    app = create_app(Settings(persistence_enabled=False, knowledge_enabled=False))

    schema = app.openapi()
    output_path.write_text(yaml.dump(schema, sort_keys=False), encoding="utf-8")
    print(f"Wrote {output_path.relative_to(repo_root)}")


if __name__ == "__main__":
    main()
