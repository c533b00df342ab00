"""Module entrypoint for ``python -m sharpie``."""

from .cli import main


if __name__ == "__main__":
    main()
