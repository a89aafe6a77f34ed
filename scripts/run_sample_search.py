"""Run one vector and one keyword search to check the configured search paths."""

import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from policy_bot.chat.service import create_policy_bot_service  # noqa: E402
from policy_bot.config import settings  # noqa: E402
from policy_bot.errors import PolicyBotError  # noqa: E402

SAMPLE_QUERY = "How many vacation days do employees get?"


async def main() -> int:
    print("Search flags:")
    print(f" VECTOR_SEARCH_ENABLED={settings.VECTOR_SEARCH_ENABLED}")
    print(f" BM25_SEARCH_ENABLED={settings.BM25_SEARCH_ENABLED}")
    print(f" VECTOR_BACKEND={settings.VECTOR_BACKEND}")

    try:
        service = await create_policy_bot_service()
    except PolicyBotError as e:
        print(f"Could not initialize: {e}")
        return 1

    print("\n1) Vector search")
    try:
        vector = await service.embedder.embed_one(SAMPLE_QUERY)
        hits = await service.vector_index.nearest_neighbors(vector, 3)
        print(f" vector search returned: hits={len(hits)}")
        for hit in hits:
            print(f"  {hit.score:.3f} {hit.metadata.get('source')}: {hit.content[:60]!r}")
    except PolicyBotError as e:
        print(f" vector search error: {e}")

    print("\n2) Keyword search")
    keyword_index = service.retriever.keyword_index
    if keyword_index is None:
        print(" keyword search not configured (MONGODB_URI unset)")
    else:
        try:
            hits = await keyword_index.search(SAMPLE_QUERY, "content", 3)
            print(f" keyword search returned: hits={len(hits)}")
        except PolicyBotError as e:
            print(f" keyword search error: {e}")

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
