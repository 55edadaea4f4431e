"""
Run the quotes API under uvicorn.

Bind address, port and log level come from Settings (HOST, PORT, LOG_LEVEL),
so the same .env drives both the app and its server.
"""
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn

from shipping_quotes.core.config import Settings, settings

APP_PATH = "shipping_quotes.main:app"


def server_options(config: Settings = settings) -> dict:
    return {
        "host": config.HOST,
        "port": config.PORT,
        "log_level": config.LOG_LEVEL.lower(),
        "reload": config.DEBUG,
    }


def main() -> None:
    uvicorn.run(APP_PATH, **server_options())


if __name__ == "__main__":
    main()
