"""
Demo client for the People & Events API

Usage:
    python scripts/run_client.py [base-url]

Defaults to API_BASE_URL from the environment (http://localhost:8000).
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
from tutorial_service.client import PeopleClient, run_demo
from tutorial_service.core.config import settings


async def run(base_url: str) -> dict:
    async with PeopleClient(base_url=base_url, timeout=10) as client:
        return await run_demo(client)


def main():
    base_url = sys.argv[1] if len(sys.argv) > 1 else settings.api_base_url

    print(f"Target: {base_url}")

    try:
        statuses = asyncio.run(run(base_url))
    except httpx.HTTPError as e:
        print(f"Error: Cannot complete demo against API: {e}")
        sys.exit(1)

    for step, status_code in statuses.items():
        print(f"{step.upper():<8} {status_code}")


if __name__ == "__main__":
    main()
