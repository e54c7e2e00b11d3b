"""Serve the API with uvicorn: ``eventhub-api`` or ``python -m eventhub.run``."""

import os

import uvicorn


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("eventhub.main:app", host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
