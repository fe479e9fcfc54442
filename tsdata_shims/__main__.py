"""Entry point for ``python -m tsdata_shims``."""

import sys

from tsdata_shims.checker import _main


def main() -> int:
    return _main()


if __name__ == "__main__":
    sys.exit(main())
