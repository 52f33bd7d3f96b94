"""CLI entry point for the SpecForge API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="specforge-server",
        description="SpecForge API server: versioned OpenAPI specs and generated npm clients",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database file in the working directory",
    )
    parser.add_argument("--reload", action="store_true", help="Reload on source changes")
    args = parser.parse_args(argv)

    if args.local:
        os.environ["SPECFORGE_LOCAL_MODE"] = "1"

    import uvicorn

    uvicorn.run("specforge.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
