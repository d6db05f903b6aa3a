# /scripts/cli_flow_check.py
# Smoke-test a running server: health → readiness → filters → autocomplete → search.
#
# Usage:
#   python scripts/cli_flow_check.py --base http://127.0.0.1:3001 --prefix par --query paracetamol
from __future__ import annotations
import argparse, json, sys, time
from pathlib import Path

import requests

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from clients.catalog_client import MedSearchClient

def print_step(title):
    print(f"\n=== {title} ===")

def pretty(o, indent=2):
    return json.dumps(o, indent=indent, ensure_ascii=False)

def timed(fn, *a, **kw):
    t0 = time.perf_counter()
    out = fn(*a, **kw)
    print(f"OK in {(time.perf_counter() - t0) * 1000:.0f} ms")
    return out

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--base", default="http://127.0.0.1:3001")
    ap.add_argument("--prefix", default="par")
    ap.add_argument("--query", default="paracetamol")
    ap.add_argument("--category")
    ap.add_argument("--manufacturer")
    args = ap.parse_args()

    cli = MedSearchClient(args.base)
    try:
        print_step("HEALTH /health")
        print(pretty(timed(cli.health)))

        print_step("READY /readyz")
        print(pretty(timed(cli.readiness)))

        print_step("FILTERS /api/filters")
        f = timed(cli.filters)
        print(f"{len(f.get('categories', []))} categories, {len(f.get('manufacturers', []))} manufacturers")

        print_step(f"AUTOCOMPLETE /api/autocomplete?q={args.prefix}")
        print(pretty(timed(cli.autocomplete, args.prefix)))

        print_step(f"SEARCH /api/search?q={args.query}")
        res = timed(cli.search, args.query, category=args.category, manufacturer=args.manufacturer)
        print(f"total={res.get('total')}")
        for i, h in enumerate(res.get("hits", [])[:5], 1):
            print(f"{i:2d}. {h.get('name')} ({h.get('generic_name')}) | {h.get('category')} | "
                  f"{h.get('manufacturer')} [score={h.get('score')}]")
    except requests.HTTPError as e:
        body = e.response.text if e.response is not None else ""
        print(f"HTTP error: {e}\n{body}")
        sys.exit(1)
    except requests.RequestException as e:
        print(f"Request failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
