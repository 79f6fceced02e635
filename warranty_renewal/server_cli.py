"""CLI entry point for the warranty renewal API server."""

import argparse


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="warranty-renewal-server",
        description="Orders warranty renewal API server",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)

    import uvicorn

    uvicorn.run("warranty_renewal.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
