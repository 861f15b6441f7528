"""Puzzlore — dev launcher. Starts the game API in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")


def main():
    parser = argparse.ArgumentParser(description="Puzzlore dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Player data directory (default: ./data)")
    parser.add_argument("--content-dir", type=Path, default=None,
                        help="Constellation catalog directory (default: ./content/constellations)")
    parser.add_argument("--reset", action="store_true",
                        help="Wipe saved progress before starting")
    args = parser.parse_args()

    if args.reset:
        from puzzlore.progress import ProgressStore
        from puzzlore.storage import JsonFileStore
        data_dir = args.data_dir or Path(os.getenv("DATA_DIR", str(ROOT / "data")))
        ProgressStore(JsonFileStore(data_dir)).reset_progress()
        print(f"Progress in {data_dir} reset.")

    # Build env for the subprocess so the backend picks up the same directories
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())
    if args.content_dir:
        env["CONTENT_DIR"] = str(args.content_dir.resolve())

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

    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    procs.append(subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "backend.app:app", "--reload",
         "--host", HOST, "--port", BACKEND_PORT],
        cwd=ROOT, env=env,
    ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()
