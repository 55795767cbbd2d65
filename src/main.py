"""Entry point: search (one-shot discover search)."""

import argparse
import sys


def main():
    parser = argparse.ArgumentParser(
        prog="python -m src.main",
        description="Federated discover search over artisans, users, posts and products.",
    )
    sub = parser.add_subparsers(dest="mode")
    search = sub.add_parser("search", help="Run one search and print the aggregated result")
    search.add_argument("text", nargs="*", help="Search text (read from stdin when omitted)")
    search.add_argument(
        "--type",
        default="all",
        choices=["all", "artisans", "users", "posts", "products"],
        help="Tab to search; 'all' is the overview",
    )
    search.add_argument("--page", type=int, default=1)
    search.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Generic filter, e.g. sort=createdAt or min_price=100000",
    )

    args = parser.parse_args()
    if args.mode != "search":
        parser.print_usage()
        sys.exit(1)

    from src.interfaces.oneshot import main as run_oneshot_main
    from src.interfaces.oneshot import parse_filters

    text = " ".join(args.text).strip() if args.text else sys.stdin.read().strip()
    try:
        filters = parse_filters(args.filter)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)
    sys.exit(run_oneshot_main(text, category=args.type, page=args.page, filters=filters))


if __name__ == "__main__":
    main()
