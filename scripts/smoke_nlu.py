#!/usr/bin/env python
"""Manual smoke test: sends a short conversation to a running NLU service.

Usage:
    python scripts/smoke_nlu.py [options]

Options:
    --url URL        Process endpoint (default: http://localhost:3000/api/nlu/process)
    --user-id ID     User identifier to send (default: smoke-user-1)

Exit codes:
    0   every request returned 200
    1   at least one request failed
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import httpx

SAMPLE_MESSAGES = [
    "My period started yesterday with heavy flow and some cramps.",
    "I've been feeling tired and have a headache today. Is this related to my cycle?",
    "When is my next period likely to start?",
]


async def _run(url: str, user_id: str) -> int:
    failures = 0
    async with httpx.AsyncClient(timeout=httpx.Timeout(120.0, connect=10.0)) as client:
        for i, message in enumerate(SAMPLE_MESSAGES, 1):
            print(f'Test {i}: "{message}"')
            try:
                resp = await client.post(url, json={"userId": user_id, "message": message})
            except httpx.HTTPError as e:
                print(f"  request failed: {e}\n---\n")
                failures += 1
                continue

            data = resp.json()
            if resp.status_code != 200:
                print(f"  HTTP {resp.status_code}: {data}\n---\n")
                failures += 1
                continue

            for key, label in (
                ("intent", "Intent"),
                ("entities", "Entities"),
                ("cycleData", "Cycle Data"),
                ("contextAwareness", "Context"),
            ):
                print(f"{label}: {json.dumps(data.get(key), indent=2)}")
            print("---\n")

    print("Tests completed!")
    return 1 if failures else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke-test a running NLU service")
    parser.add_argument("--url", default="http://localhost:3000/api/nlu/process")
    parser.add_argument("--user-id", default="smoke-user-1")
    args = parser.parse_args()
    sys.exit(asyncio.run(_run(args.url, args.user_id)))


if __name__ == "__main__":
    main()
