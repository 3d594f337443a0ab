# SPDX-License-Identifier: MIT

from loreline.cleanup import register_cleanup
from loreline.initialize import initialize
from loreline.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
