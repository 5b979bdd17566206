import sys

from csv_i18n.cli import main

if __name__ == "__main__":
    sys.exit(main())
