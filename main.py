"""Dolmenwood Dashboard dev launcher. Starts the API server in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dolmenwood.config import load_settings

ROOT = Path(__file__).parent


def main():
    parser = argparse.ArgumentParser(description="Dolmenwood Dashboard dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Local storage directory (default: ./data)")
    parser.add_argument("--cloud-url", default=None,
                        help="Redis URL for cloud storage (default: local only)")
    args = parser.parse_args()

    settings = load_settings()

    # Build env for the server so it picks up the same storage settings
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())
    if args.cloud_url:
        env["CLOUD_URL"] = args.cloud_url

    procs: list[subprocess.Popen] = []

    def shutdown(*_):
        print("\nShutting down...")
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print(f"Starting API server on http://localhost:{settings.port} ...")
    procs.append(subprocess.Popen(
        ["uv", "run", "uvicorn", "backend.app:create_app", "--factory", "--reload",
         "--host", settings.host, "--port", str(settings.port),
         "--log-level", settings.log_level.lower()],
        cwd=ROOT, env=env,
    ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()
