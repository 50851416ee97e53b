import sys

from e2erunner.cli._dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
