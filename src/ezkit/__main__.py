"""Module entrypoint for ``python -m ezkit``."""

from .cli import app


def main() -> None:
    app(prog_name="ezkit")


if __name__ == "__main__":
    main()
