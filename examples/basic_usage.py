"""Basic usage example for the content search system."""

import asyncio
import json
import tempfile
from pathlib import Path

from content_search import ContentSearchService, SearchSettings

SAMPLE_CONTENT = {
    "blog": [
        {
            "id": "javascript-tips",
            "title": "JavaScript Tips",
            "description": "Useful JavaScript tips and tricks",
            "content": "Prefer const over let. Arrow functions keep this bound to the enclosing scope.",
            "tags": ["javascript", "tips"],
            "category": "tutorial",
            "status": "published",
            "priority": 8,
            "createdAt": "2025-11-02T09:00:00Z"
        },
        {
            "id": "react-hooks",
            "title": "React Hooks Guide",
            "description": "Learn how to use React hooks effectively",
            "content": "Hooks let function components hold state. The useEffect hook runs side effects.",
            "tags": ["react", "hooks", "javascript"],
            "category": "tutorial",
            "status": "published",
            "priority": 5
        },
        {
            "id": "upcoming",
            "title": "Upcoming Rust Series",
            "description": "Not published yet",
            "tags": ["rust"],
            "status": "draft"
        }
    ],
    "portfolio": [
        {
            "id": "bakery-site",
            "title": "Bakery Website Redesign",
            "description": "Responsive redesign of a neighbourhood bakery website",
            "tags": ["web", "design"],
            "category": "develop",
            "status": "published",
            "stats": {"views": 340}
        }
    ],
    "tool": [
        {
            "id": "pomodoro",
            "title": "Pomodoro Timer",
            "description": "Focus timer with configurable breaks",
            "tags": ["productivity"],
            "category": "utility",
            "status": "published"
        }
    ]
}


def write_sample_content(data_dir: Path) -> None:
    """Write one JSON file per content type."""
    data_dir.mkdir(parents=True, exist_ok=True)
    for content_type, records in SAMPLE_CONTENT.items():
        with open(data_dir / f"{content_type}.json", "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)


async def basic_search_demo():
    """Demonstrate basic search functionality."""
    print("Content Search - Basic Usage Demo")
    print("=" * 50)

    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        write_sample_content(root / "content")

        settings = SearchSettings(
            data_dir=root / "content",
            cache_dir=root / "cache",
            log_level="WARNING"
        )

        print("\n1. Initializing search service...")
        async with ContentSearchService.create(settings=settings) as service:
            stats = await service.get_stats()
            print(f"   Index contains {stats['engine']['total_entries']} entries")

            print("\n2. Performing searches...")
            for query in ["javascript", "javscript", "bakery", "timer", "rust"]:
                results = await service.search(query, {"limit": 3})
                print(f"\n   Query: '{query}'")
                if not results:
                    print("   No results found")
                for i, result in enumerate(results, 1):
                    print(f"     {i}. [{result.type.value}] {result.title} - Score: {result.score:.2f}")
                    print(f"        URL: {result.url}")
                    if result.highlights:
                        print(f"        Highlight: {result.highlights[0]}")

            print("\n3. Filtering and pagination...")
            response = await service.search_page("javascript", {"type": "blog", "limit": 1})
            print(f"   {response.total} blog results, showing {len(response.results)}, more: {response.has_more}")

            response = await service.search_page("reakt hooks", {"fuzzy": False})
            print(f"   No match for 'reakt hooks', try: {response.suggested_queries}")

            print("\n4. Suggestions and related content...")
            print(f"   Suggestions for 'ja': {await service.get_suggestions('ja')}")
            related = await service.get_related_content("javascript-tips")
            for item in related:
                print(f"   Related: {item.title} (score {item.score}) -> {item.url}")

            print("\n5. Cache and health...")
            print(f"   Cached queries: {service.cache_stats()['size']}")
            health = await service.health_check()
            print(f"   System status: {health['status']}")

    print("\nDemo completed successfully!")


if __name__ == "__main__":
    asyncio.run(basic_search_demo())
