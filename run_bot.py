# run_bot.py
"""
Local launcher for the long-poll bot.
Equivalent to: `storybot --config config.yaml`
"""

import sys

from src.bot import main

if __name__ == "__main__":
    sys.exit(main())
