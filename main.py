"""AdScout command line - run research, generate ad copy, bust cache entries"""

import argparse
import asyncio
import json
import sys

from src.config import get_settings
from src.graph.nodes import drain_cache_writes
from src.logging_config import configure_logging
from src.runner import bust_cache, handle_generate_ad_request, handle_research_request

OBJECTIVES = ["competitor-analysis", "market-trends", "audience-insights", "full-research"]
PROVIDERS = ["claude", "openai", "gemini"]
AD_TONES = ["professional", "casual", "friendly", "urgent", "humorous"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adscout",
        description="Research-powered Meta ad copy generation",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    research = subparsers.add_parser("research", help="Research a brand website")
    research.add_argument("url", help="Brand website URL")
    research.add_argument("product_type", help="Product or industry, e.g. 'CRM software'")
    research.add_argument("--goal", choices=OBJECTIVES, default="full-research")
    research.add_argument("--location", help="Target market (inferred from the URL if omitted)")
    research.add_argument("--force-refresh", action="store_true", help="Ignore cached research")

    ad = subparsers.add_parser("ad", help="Generate ad copy")
    ad.add_argument("--provider", choices=PROVIDERS, default="claude")
    ad.add_argument("--name", required=True, help="Brand name")
    ad.add_argument("--product", required=True, help="Product or service")
    ad.add_argument("--audience", required=True, help="Target audience")
    ad.add_argument("--benefits", required=True, help="Key benefits")
    ad.add_argument("--tone", choices=AD_TONES, default="professional")
    ad.add_argument("--context", help="Additional context")
    ad.add_argument(
        "--research-file",
        help="JSON file holding a research result (the 'data' of a research response)",
    )

    bust = subparsers.add_parser("cache-bust", help="Delete cached research for a URL")
    bust.add_argument("url", help="Brand website URL")

    return parser


async def _research(args: argparse.Namespace) -> int:
    payload = {
        "websiteUrl": args.url,
        "productType": args.product_type,
        "campaignGoal": args.goal,
        "forceRefresh": args.force_refresh,
    }
    if args.location:
        payload["location"] = args.location

    response = await handle_research_request(payload)
    await drain_cache_writes()
    print(response.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return 0 if response.success else 1


async def _ad(args: argparse.Namespace) -> int:
    payload = {
        "provider": args.provider,
        "name": args.name,
        "product": args.product,
        "targetAudience": args.audience,
        "keyBenefits": args.benefits,
        "tone": args.tone,
        "context": args.context,
    }
    if args.research_file:
        with open(args.research_file, encoding="utf-8") as f:
            research = json.load(f)
        # Accept a whole research response as well as its bare data
        payload["research"] = research.get("data", research)

    response = await handle_generate_ad_request(payload)
    print(response.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return 0 if response.success else 1


async def _cache_bust(args: argparse.Namespace) -> int:
    await bust_cache(args.url)
    print(f"Cache entry removed for {args.url}")
    return 0


COMMANDS = {
    "research": _research,
    "ad": _ad,
    "cache-bust": _cache_bust,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    return asyncio.run(COMMANDS[args.command](args))


if __name__ == "__main__":
    sys.exit(main())
