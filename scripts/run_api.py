import argparse
import subprocess
import sys
import os
from pathlib import Path

def main():
    parser = argparse.ArgumentParser(description="Serve the quote pricing API with uvicorn")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", default="8000")
    parser.add_argument("--packages-file", help="JSON package store to serve (overrides QUOTE_PRICING_PACKAGES_FILE)")
    parser.add_argument("--no-reload", action="store_true")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    # Uvicorn imports the app from src/
    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)
    if args.packages_file:
        env["QUOTE_PRICING_PACKAGES_FILE"] = str(Path(args.packages_file).resolve())

    command = [
        sys.executable, "-m", "uvicorn",
        "quote_pricing.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if not args.no_reload:
        command.append("--reload")

    print(f"Starting Quote Pricing API on http://{args.host}:{args.port} ...")
    try:
        subprocess.run(command, env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")

if __name__ == "__main__":
    main()
