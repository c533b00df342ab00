#!/usr/bin/env python3
"""Print the symbol outline of a C# or Go file."""

from __future__ import annotations

from sharpie.cli import main


if __name__ == "__main__":
    main()
