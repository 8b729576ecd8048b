"""
write_load.py — simple async load script to create links

Registers (or logs in) a load-test user, then creates links through
/api/create with a tiny generated GIF as the loading image.

Usage:
  python write_load.py --base http://127.0.0.1:8000 --count 2000 --concurrency 100 --out links_created.jsonl
"""
import argparse
import asyncio
import json
import random
import string
import time
from datetime import datetime, timezone

import httpx

# 1x1 transparent GIF
PIXEL_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00"
    b",\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _rand_host():
    tlds = ["com", "net", "org", "io", "ai"]
    names = ["example", "sample", "demo", "test", "alpha", "beta", "gamma"]
    return f"{random.choice(names)}.{random.choice(tlds)}"

def _rand_id(n=10):
    alphabet = string.ascii_letters + string.digits
    return "".join(random.choice(alphabet) for _ in range(n))

async def _session(client: httpx.AsyncClient, base: str, username: str, password: str):
    creds = {"username": username, "password": password}
    r = await client.post(f"{base}/api/register", json=creds)
    if r.status_code == 400:
        r = await client.post(f"{base}/api/login", json=creds)
    r.raise_for_status()

async def _create_one(client: httpx.AsyncClient, base: str, out_file, idx: int):
    link_id = f"lt{idx}-{_rand_id(6)}"
    data = {
        "id": link_id,
        "urlMobile": f"https://m.{_rand_host()}/{_rand_id(8)}?q={idx}",
        "urlDesktop": f"https://{_rand_host()}/{_rand_id(8)}?q={idx}",
    }
    files = {"image": ("pixel.gif", PIXEL_GIF, "image/gif")}
    try:
        r = await client.post(f"{base}/api/create", data=data, files=files, timeout=10)
        r.raise_for_status()
        if out_file:
            out_file.write(json.dumps({"id": link_id, "link": r.json().get("link")}) + "\n")
        return True
    except Exception:
        return False

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--user", default="loadtest")
    parser.add_argument("--password", default="loadtest")
    parser.add_argument("--out", default="links_created.jsonl")
    args = parser.parse_args()

    start_iso = _now_iso()
    t0 = time.perf_counter()
    success = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    # IMPORTANT: file uses normal "with"; client uses "async with" separately
    with open(args.out, "w", encoding="utf-8") as out_f:
        async with httpx.AsyncClient(limits=limit) as client:
            await _session(client, args.base, args.user, args.password)
            sem = asyncio.Semaphore(args.concurrency)

            async def _task(i):
                nonlocal success
                async with sem:
                    ok = await _create_one(client, args.base, out_f, i)
                    if ok:
                        success += 1

            await asyncio.gather(*(_task(i) for i in range(args.count)))

    dt = time.perf_counter() - t0
    end_iso = _now_iso()
    print(f"START: {start_iso}")
    print(f"END:   {end_iso}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   writes={args.count}, ok={success}, fail={args.count - success}")
    if dt > 0:
        print(f"TPS:   {success/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
