import sys

from omnidef import cli
from omnidef import log


def main():
    """ Console entry point. Failures are logged and exit with status 1. """
    try:
        cli.cli(obj=dict())
    except Exception as e:
        log.exception(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
