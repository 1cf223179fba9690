"""TripScout - travel search from the terminal.

Runs one query through the same pipeline the HTTP API uses and prints the
events as they arrive.
"""

import argparse
import asyncio
import sys

from tripscout.agents.orchestrator import QueryPlan, SearchOrchestrator
from tripscout.config import settings
from tripscout.errors import ConfigurationError
from tripscout.models.schemas import ModelProvider, normalize_domain


async def run_search(
    query: str,
    *,
    domains: list[str],
    time_range: str,
    provider: ModelProvider,
) -> int:
    """Run a search and print its event stream. Returns a process exit code."""
    print(f"Query: {query}")
    print("-" * 50)

    plan = QueryPlan(
        query=query,
        search_domains=tuple(d for d in (normalize_domain(raw) for raw in domains) if d),
        time_range=time_range,
        model_provider=provider,
        search_api_key=settings.firecrawl_api_key,
    )
    orchestrator = SearchOrchestrator(provider)

    exit_code = 0
    async for event in orchestrator.run(plan):
        event_type = event.event.value
        data = event.data

        if event_type == "status":
            print(f"[~] {data.get('message', '')}")

        elif event_type == "sources":
            sources = data.get("sources", [])
            print(f"\n[*] Sources ({len(sources)}):")
            for i, source in enumerate(sources, 1):
                print(f"  [{i}] {source.get('title', '')[:80]}")
                print(f"      {source.get('url', '')}")
            print()

        elif event_type == "ticker":
            print(f"[$] Ticker: {data.get('symbol')}")

        elif event_type == "text":
            print(data.get("text", ""), end="", flush=True)

        elif event_type == "follow_up_questions":
            questions = data.get("questions", [])
            if questions:
                print("\n\n[?] Follow-up questions:")
                for question in questions:
                    print(f"  - {question}")

        elif event_type == "complete":
            print("\n\n[*] Done.")

        elif event_type == "error":
            print(f"\n[!] Error: {data.get('message', 'Unknown error')}")
            if data.get("suggestion"):
                print(f"    {data['suggestion']}")
            exit_code = 1

    return exit_code


def main():
    parser = argparse.ArgumentParser(description="TripScout travel search")
    parser.add_argument("--query", "-q", required=True, help="Travel question")
    parser.add_argument(
        "--domain",
        "-d",
        action="append",
        default=[],
        help="Restrict sources to this domain (repeatable)",
    )
    parser.add_argument(
        "--time-range",
        "-t",
        choices=["all", "1d", "7d", "30d"],
        default="all",
        help="Only use sources published within this range",
    )
    parser.add_argument(
        "--provider",
        "-p",
        choices=[p.value for p in ModelProvider],
        default=ModelProvider.OPENAI.value,
        help="Answer backend",
    )

    args = parser.parse_args()

    if not settings.firecrawl_api_key:
        parser.error("FIRECRAWL_API_KEY is not configured")

    try:
        code = asyncio.run(
            run_search(
                args.query,
                domains=args.domain,
                time_range=args.time_range,
                provider=ModelProvider(args.provider),
            )
        )
    except ConfigurationError as e:
        parser.error(str(e))
    sys.exit(code)


if __name__ == "__main__":
    main()
