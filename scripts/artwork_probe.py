#!/usr/bin/env python3
import argparse
import asyncio
import json
import os
import sys
import time
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


def _duration_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


async def probe_provider(aggregator, provider, term: str, platform, limit: int) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "provider_id": provider.id.value,
        "provider_name": provider.name,
        "search_ok": False,
        "candidate_count": 0,
        "candidates": [],
        "search_ms": None,
    }

    hint = platform if provider.requires_platform else None
    start = time.time()
    candidates = await aggregator.run_provider(provider, term, hint, limit)
    result["search_ms"] = _duration_ms(start)
    result["search_ok"] = bool(candidates)
    result["candidate_count"] = len(candidates)
    result["candidates"] = [candidate.url for candidate in candidates]
    return result


async def run_probe(titles: List[str], platform, limit: int, randomize: bool) -> List[Dict[str, Any]]:
    from gameshelf_app.artwork import ArtworkResolver, normalize  # pylint: disable=import-outside-toplevel

    reports = []
    async with ArtworkResolver() as resolver:
        for title in titles:
            query = normalize(title, platform_hint=platform, randomize=randomize)
            if query is None:
                reports.append({"title": title, "error": "blank title"})
                continue

            providers = await asyncio.gather(*(
                probe_provider(resolver.aggregator, provider, query.primary_term, platform, limit)
                for provider in resolver.providers
            ))

            start = time.time()
            url = await resolver.resolve_artwork(title, platform, randomize)
            reports.append({
                "title": title,
                "primary_term": query.primary_term,
                "secondary_term": query.secondary_term,
                "resolved_url": url,
                "resolve_ms": _duration_ms(start),
                "providers": providers,
            })
    return reports


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Probe artwork catalogs for a set of titles.")
    parser.add_argument("titles", nargs="*", default=["艾尔登法环 (Elden Ring)"], help="Titles to resolve.")
    parser.add_argument("--platform", default="", help="Platform hint, e.g. PS5 or SNES.")
    parser.add_argument("--limit", type=int, default=3, help="Candidates per provider to report.")
    parser.add_argument("--randomize", action="store_true", help="Resolve in re-roll mode.")
    parser.add_argument(
        "--output",
        default="debugging/artwork_probe.json",
        help="Output JSON report path."
    )
    parser.add_argument("--env", default=".env", help="Path to .env file for artwork settings.")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    if args.env and os.path.exists(args.env):
        load_dotenv(args.env)

    sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

    from gameshelf_app.artwork import PlatformTag  # pylint: disable=import-outside-toplevel

    platform: Optional[PlatformTag] = None
    if args.platform:
        platform = PlatformTag.parse(args.platform)
        if platform is None:
            print(f"Unknown platform: {args.platform}", file=sys.stderr)
            return 2

    reports = asyncio.run(run_probe(args.titles, platform, max(1, args.limit), args.randomize))

    report = {
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        "platform": platform.value if platform else None,
        "randomize": bool(args.randomize),
        "total_titles": len(reports),
        "unresolved": sum(1 for item in reports if not item.get("resolved_url")),
        "titles": reports,
    }

    output_dir = os.path.dirname(args.output)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2, sort_keys=True, ensure_ascii=False)

    print(f"Wrote report to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
