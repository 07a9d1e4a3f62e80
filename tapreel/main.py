"""Entry: start API server; the lifespan hook brings up the RFID reader."""
import uvicorn

from tapreel.config import API_HOST, API_PORT, LOG_LEVEL, configure_logging


def main() -> None:
    configure_logging(LOG_LEVEL)
    # No reload: the reader must be owned by exactly one process
    uvicorn.run(
        "tapreel.api.app:app",
        host=API_HOST,
        port=API_PORT,
    )


if __name__ == "__main__":
    main()
