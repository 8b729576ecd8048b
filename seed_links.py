# seed_links.py
"""
Write a legacy *flat* links.json ({id: entry}) for migration drills.

The next registration or link creation against this file moves every entry
under the "global" namespace.

Usage:
  python seed_links.py --out data/links.json --count 200 --prefix mk
"""
import argparse
import json
import os
import time


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", default=os.path.join("data", "links.json"))
    ap.add_argument("--count", type=int, default=200, help="entries to write")
    ap.add_argument("--prefix", default="mk", help="id prefix")
    ap.add_argument("--force", action="store_true", help="overwrite an existing document")
    args = ap.parse_args()

    if os.path.exists(args.out) and not args.force:
        raise SystemExit(f"{args.out} exists; pass --force to overwrite")

    t0 = time.perf_counter()
    doc = {}
    for i in range(args.count):
        link_id = f"{args.prefix}{i}"
        doc[link_id] = {
            "id": link_id,
            "image": f"/uploads/{link_id}-0-seed.gif",
            "urlMobile": f"https://m.example.com/{link_id}",
            "urlDesktop": f"https://example.com/{link_id}" if i % 2 else "",
        }

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2)

    dt = time.perf_counter() - t0
    print(f"WROTE: {args.count} flat entries to {args.out} in {dt:.3f} s")


if __name__ == "__main__":
    main()
