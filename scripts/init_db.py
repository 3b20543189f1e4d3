"""Initialize the media catalog database."""

from src.media_catalog.config import load_config


def main() -> None:
    load_config()
    print("Database initialized.")


if __name__ == "__main__":
    main()
