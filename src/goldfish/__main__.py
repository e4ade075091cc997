"""Allow ``python -m goldfish``."""

from .cli import main

if __name__ == "__main__":
    main()
