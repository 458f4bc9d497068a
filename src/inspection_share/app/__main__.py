"""Run the share API with uvicorn.

Usage:
    python -m inspection_share.app --host 0.0.0.0 --port 8000

Settings come from the environment (see AppSettings.from_env).
"""

from __future__ import annotations

import argparse

import uvicorn

from .main import create_app
from .settings import AppSettings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="inspection-share")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    app = create_app(AppSettings.from_env())
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
