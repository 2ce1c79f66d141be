#!/usr/bin/env python3
"""Seed a running records service with a sample product catalogue."""
from __future__ import annotations

import argparse
import json
import random
import sys
import time
from pathlib import Path
from typing import Dict, List

import requests

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from json_records.config import DEFAULT_PORT

SAMPLE_ITEMS = [
    {"name": "Laptop", "price": 1000},
    {"name": "Smartphone", "price": 700},
    {"name": "Tablet", "price": 450},
    {"name": "Headphones", "price": 150},
    {"name": "Smartwatch", "price": 300},
    {"name": "Keyboard", "price": 100},
    {"name": "Mouse", "price": 50},
    {"name": "Monitor", "price": 250},
    {"name": "External Hard Drive", "price": 200},
    {"name": "Webcam", "price": 120},
    {"name": "Speaker", "price": 180},
    {"name": "Printer", "price": 400},
    {"name": "Router", "price": 80},
    {"name": "Gaming Console", "price": 500},
    {"name": "VR Headset", "price": 350},
    {"name": "Drone", "price": 600},
    {"name": "Digital Camera", "price": 800},
    {"name": "Projector", "price": 900},
    {"name": "Smart Light", "price": 60},
    {"name": "Portable Charger", "price": 30},
]


def with_provisional_ids(items: List[Dict[str, object]]) -> List[Dict[str, object]]:
    return [
        {**item, "id": int(time.time() * 1000) + random.randint(0, 9999)}
        for item in items
    ]


def seed(base_url: str) -> List[Dict[str, object]]:
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    created = []
    for item in SAMPLE_ITEMS:
        response = session.post(f"{base_url.rstrip('/')}/data", json=item, timeout=10)
        response.raise_for_status()
        created.append(response.json()["data"])
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-url", default=f"http://localhost:{DEFAULT_PORT}")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the catalogue with provisional ids instead of posting it",
    )
    args = parser.parse_args()

    if args.dry_run:
        print(json.dumps(with_provisional_ids(SAMPLE_ITEMS), indent=2))
        return

    created = seed(args.base_url)
    print(f"Created {len(created)} records at {args.base_url}")


if __name__ == "__main__":
    main()
