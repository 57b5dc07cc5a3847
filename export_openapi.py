#!/usr/bin/env python3
"""Export the assistant API's OpenAPI schema to a JSON file."""

import argparse
import json
from pathlib import Path

from app.main import app


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(__file__).parent / "openapi.json",
        help="Destination file (default: openapi.json next to this script)",
    )
    args = parser.parse_args()

    openapi_schema = app.openapi()
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(openapi_schema, f, indent=2, ensure_ascii=False)

    paths = ", ".join(sorted(openapi_schema.get("paths", {})))
    print(f"OpenAPI schema exported to: {args.output}")
    print(f"Paths: {paths}")


if __name__ == "__main__":
    main()
