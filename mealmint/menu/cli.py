"""CLI entry point for the menu module."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import load_config
from .controller import MenuRecommender
from .errors import MenuAnalysisError
from .tags import map_profile_dining_style_to_tags, normalize_tags, split_hard_soft_tags

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mealmint-menu",
        description="MealMint menu planner: read a menu photo and pick dishes within a budget",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to a TOML config file",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log pipeline steps")

    sub = parser.add_subparsers(dest="command")

    # tags
    tags_parser = sub.add_parser("tags", help="Show how dietary tags are parsed")
    tags_parser.add_argument("text", nargs="*", help='Tags, e.g. "vegan, no mushroom"')

    # extract
    extract_parser = sub.add_parser("extract", help="Extract dishes from a menu photo")
    extract_parser.add_argument("--image", type=str, required=True, help="Menu photo")
    extract_parser.add_argument("--json", action="store_true", help="Output JSON")

    # recommend
    rec_parser = sub.add_parser("recommend", help="Photo → filter → budget plan")
    rec_parser.add_argument("--image", type=str, required=True, help="Menu photo")
    rec_parser.add_argument(
        "--budget", type=float, nargs="+", required=True,
        help="Budget; extra values re-plan the same menu",
    )
    rec_parser.add_argument("--tags", type=str, default=None, help="Dietary tags")
    rec_parser.add_argument(
        "--profile-tags", type=str, nargs="*", default=None,
        help='Profile dining styles such as "Dairy Free", used when no --tags are given',
    )
    rec_parser.add_argument(
        "--ignore-profile-tags", action="store_true",
        help="Use default tags instead of profile tags",
    )
    rec_parser.add_argument("--note", type=str, default="", help="Note for the planner")
    rec_parser.add_argument("--json", action="store_true", help="Output JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()
    config = load_config(args.config)

    try:
        match args.command:
            case "tags":
                _cmd_tags(args)
            case "extract":
                asyncio.run(_cmd_extract(config, args))
            case "recommend":
                asyncio.run(_cmd_recommend(config, args))
    except MenuAnalysisError as e:
        logger.debug("Pipeline failed", exc_info=True)
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)


def _read_image(path: str) -> tuple[bytes, str]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    mime_type = mimetypes.guess_type(path)[0] or "image/jpeg"
    return p.read_bytes(), mime_type


def _cmd_tags(args) -> None:
    tags = normalize_tags(" ".join(args.text) if args.text else None)
    split = split_hard_soft_tags(tags)
    print(f"Tags:       {', '.join(tags)}")
    print(f"Core diets: {', '.join(split.hard_core) or '-'}")
    print(f"Excluded:   {', '.join(split.neg_keys) or '-'}")
    print(f"Soft:       {', '.join(split.soft) or '-'}")


async def _cmd_extract(config, args) -> None:
    image, mime_type = _read_image(args.image)
    recommender = MenuRecommender(config=config)
    recommender.validate_upload(image, mime_type)
    menu_info = await recommender.extractor.extract_menu(image, mime_type)

    if args.json:
        print(json.dumps(menu_info.to_dict(), ensure_ascii=False, indent=2))
        return

    print(f"Found {len(menu_info.items)} dishes:")
    for item in menu_info.items:
        category = f"  [{item.category}]" if item.category else ""
        print(f"  {item.name:<28} {menu_info.currency}{item.price:>7.2f}{category}")


async def _cmd_recommend(config, args) -> None:
    image, mime_type = _read_image(args.image)
    recommender = MenuRecommender(config=config)
    profile_tags = map_profile_dining_style_to_tags(args.profile_tags)

    first, *rest = args.budget
    results = [
        await recommender.recommend(
            image,
            mime_type,
            first,
            tags=args.tags,
            profile_tags=profile_tags,
            ignore_profile_tags=args.ignore_profile_tags,
            user_note=args.note,
        )
    ]
    for budget in rest:
        results.append(
            await recommender.rebudget(
                budget,
                tags=args.tags,
                profile_tags=profile_tags,
                ignore_profile_tags=args.ignore_profile_tags,
                user_note=args.note,
            )
        )

    if args.json:
        data = [r.to_dict() for r in results]
        print(json.dumps(data if len(data) > 1 else data[0], ensure_ascii=False, indent=2))
        return

    for result in results:
        print(f"Tags ({result.tag_source}): {', '.join(result.tags_applied)}")
        if result.removed_by_tags:
            print(f"Removed by tags: {result.removed_by_tags}")
            for d in result.filter_debug:
                print(f"  - {d.item_name}: {d.reason} [{d.tag}]")
        print(result.recommendation.display())
        print()
