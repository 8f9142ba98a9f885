"""
Allow running the CLI with ``python -m mkcommit``.
"""

from mkcommit.cli import main


if __name__ == "__main__":
    main(prog_name="mkcommit")
