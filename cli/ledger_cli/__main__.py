"""Entry point for `python -m ledger_cli` and the `schema-ledger` console script."""

from __future__ import annotations

from ledger_cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
