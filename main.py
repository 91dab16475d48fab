"""
Entry point: open the window and run the skill graph page.
"""
from app import App
from config import ConfigLoader
from logging_config import setup_logging_from_config


def main() -> None:
    loader = ConfigLoader()
    setup_logging_from_config(loader)

    App(loader).run()


if __name__ == "__main__":
    main()
