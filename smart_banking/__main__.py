#!/usr/bin/env python3
"""Main entry point for the Smart Banking menu"""

from smart_banking.cli import main


if __name__ == "__main__":
    main()
