"""Allow ``python -m teamflow``."""

from teamflow.cli import main

if __name__ == "__main__":
    main()
