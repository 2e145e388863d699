import argparse
import json
from pathlib import Path

from cardwise.agents.orchestrator import RecommendationOrchestrator
from cardwise.api.app import run as run_api
from cardwise.config import configure_logging, settings
from cardwise.domain.errors import CardwiseError, ValidationError
from cardwise.engine.validation import parse_payload
from cardwise.repository.catalog_store import CatalogStore
from cardwise.schemas.requests import RecommendRequest


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cardwise unified entrypoint")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["api", "recommend", "strategies", "by-category"],
        default="api",
        help="Run mode: api (default), recommend, strategies, by-category",
    )
    parser.add_argument("--request", help="JSON file with a recommendation request")
    parser.add_argument("--catalog", default=settings.catalog_file, help="JSON catalog file")
    parser.add_argument("--log-level", default=None)
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.mode == "api":
        run_api()
        return

    configure_logging(args.log_level)
    if not args.request:
        parser.error(f"--request is required for mode '{args.mode}'")

    try:
        request = parse_payload(RecommendRequest, json.loads(Path(args.request).read_text(encoding="utf-8")))
    except ValidationError as exc:
        parser.error(str(exc))
    orchestrator = RecommendationOrchestrator(CatalogStore(args.catalog))

    try:
        if args.mode == "recommend":
            response = orchestrator.recommend(request)
        elif args.mode == "strategies":
            response = orchestrator.strategies(request)
        else:
            response = orchestrator.category_leaders(request)
    except CardwiseError as exc:
        parser.exit(1, f"error: {exc}\n")

    print(response.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
