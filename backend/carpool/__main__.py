"""Module entry point: python -m carpool ..."""

from carpool.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
