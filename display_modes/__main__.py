"""Entry point for: python -m display_modes"""

from .cli import main

if __name__ == "__main__":
    main()
