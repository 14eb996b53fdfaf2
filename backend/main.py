"""
Entry point for the GitHub updates newsletter API.

Usage:
    uv run python main.py
"""

import uvicorn

from api import create_app
from config.settings import load_settings


def main() -> None:
    settings = load_settings()
    app = create_app(settings=settings)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
