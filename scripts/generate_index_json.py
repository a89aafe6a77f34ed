"""Write Atlas Search index definitions for the policy chunk collection."""

import argparse
import json
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from policy_bot.config import settings  # noqa: E402
from policy_bot.rag.atlas import (  # noqa: E402
    build_keyword_index_descriptor,
    build_vector_index_descriptor,
)

README = """This directory contains Atlas Search index JSON bodies for the policy chunk collection.

Usage:
1. Upload the JSON in the Atlas UI ("Create Search Index" -> "Import JSON") or POST it to the Atlas API:

curl -u "<PUBLIC_KEY>:<PRIVATE_KEY>" -H "Content-Type: application/json" \\
  -X POST "https://cloud.mongodb.com/api/atlas/v1.0/groups/<PROJECT_ID>/fts/indexes" \\
  -d @<FILE>.json

The vector index uses "embedding" as the knn field with {dimensions} dimensions (cosine).
"""


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--dimensions",
        type=int,
        default=768,
        help="Embedding dimension of the configured model (default: 768)",
    )
    parser.add_argument(
        "--out-dir", type=Path, default=settings.INDEX_OUTPUT_DIR, help="Output directory"
    )
    args = parser.parse_args()

    args.out_dir.mkdir(parents=True, exist_ok=True)
    collection = settings.MONGODB_COLLECTION

    vector_body = build_vector_index_descriptor(dimensions=args.dimensions).to_api_body()
    vector_path = args.out_dir / f"{collection}_vector_index.json"
    vector_path.write_text(json.dumps(vector_body, indent=2), encoding="utf-8")
    print(f"Wrote vector index JSON for {collection} -> {vector_path}")

    bm25_body = build_keyword_index_descriptor().to_api_body()
    bm25_path = args.out_dir / f"{collection}_bm25keyword_index.json"
    bm25_path.write_text(json.dumps(bm25_body, indent=2), encoding="utf-8")
    print(f"Wrote BM25 keyword index JSON for {collection} -> {bm25_path}")

    (args.out_dir / "README.md").write_text(
        README.format(dimensions=args.dimensions), encoding="utf-8"
    )

    print(f"Done. JSON files are in: {args.out_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
