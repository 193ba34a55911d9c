import logging
import sys

from txtbeat.ui.main_window import Application


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    app = Application()
    return app.run(sys.argv)


if __name__ == '__main__':
    sys.exit(main())
