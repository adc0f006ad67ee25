"""Module entrypoint for ``python -m outlinemap``."""

from .cli import main


if __name__ == "__main__":
    main()
