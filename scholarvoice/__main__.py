"""Module entrypoint for running ScholarVoice as ``python -m scholarvoice``."""

from __future__ import annotations

from scholarvoice.cli import main


if __name__ == "__main__":
    main()
