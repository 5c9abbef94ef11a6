"""Allow ``python -m connected_components`` to launch the demo."""

from __future__ import annotations

import sys


def main() -> None:
    from connected_components.app import run
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
