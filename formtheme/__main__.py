"""Entry point for `python -m formtheme`."""

import sys


def main():
    from formtheme.app import run_app
    sys.exit(run_app())


if __name__ == "__main__":
    main()
