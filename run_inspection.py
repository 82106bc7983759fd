"""Convenience shim to run the history inspection from a checkout."""

from __future__ import annotations

from src.inspection.runner import main


if __name__ == "__main__":
    main()
