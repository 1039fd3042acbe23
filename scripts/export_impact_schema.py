"""Export the ewaste-impact record JSON Schema."""

from __future__ import annotations

import json
from pathlib import Path

from ewaste_impact.schemas import CURRENT_IMPACT_SCHEMA_VERSION, ImpactRecord


def main() -> None:
    """Write the JSON Schema for :class:`ImpactRecord` to the repository root."""

    schema = ImpactRecord.model_json_schema()
    output_path = Path(__file__).resolve().parent.parent / (
        f"impact_schema_v{CURRENT_IMPACT_SCHEMA_VERSION}.json"
    )
    output_path.write_text(json.dumps(schema, indent=2), encoding="utf-8")


if __name__ == "__main__":
    main()
