import asyncio
import sys

from .main import Daemon


def main() -> int:
    daemon = Daemon(sys.argv)
    return asyncio.run(daemon())


if __name__ == "__main__":
    sys.exit(main())
