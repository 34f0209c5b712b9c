import argparse
import json
import sys

from app.cards.errors import InvalidCardData
from app.cards.normalizers import NORMALIZERS, normalize_card
from app.cards.types import card_to_dict
from app.core.logging import configure_logging_if_needed
from app.geo.coordinates import extract_trip_coordinates


def parse_param(value: str) -> tuple[str, str]:
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Param must be key=value. Got: {value}")
    return key, val


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Normalize a raw tool payload into a card record")
    p.add_argument("--kind", required=True, choices=sorted(NORMALIZERS.keys()))
    p.add_argument("--file", help="JSON file (default: stdin)")
    p.add_argument(
        "--param",
        action="append",
        type=parse_param,
        default=[],
        help="Query context fallback; repeatable (e.g. --param origin=Bern)",
    )
    p.add_argument("--points", action="store_true", help="For trips, print map points instead of the record")
    p.add_argument("--log-level", default="WARNING")

    args = p.parse_args(argv)
    configure_logging_if_needed(args.log_level)

    if args.file:
        with open(args.file, encoding="utf-8") as fh:
            raw = json.load(fh)
    else:
        raw = json.load(sys.stdin)

    try:
        card = normalize_card(args.kind, raw, dict(args.param))
    except InvalidCardData as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.points and args.kind == "trip":
        out = [list(point) for point in extract_trip_coordinates(card)]
    else:
        out = card_to_dict(card)

    print(json.dumps(out, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
