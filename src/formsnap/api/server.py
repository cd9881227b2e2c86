"""
ASGI Entry Point for the formsnap API.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn),
backed by a `FileStorage` under `FORMSNAP_STORE_DIR`. It loads `.env` before
anything reads configuration.

Usage
-----
    $ python -m formsnap.api.server
    $ uvicorn formsnap.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env BEFORE building settings-dependent objects.
load_dotenv(dotenv_path=Path(".env"))

from formsnap.api.app import create_app  # noqa: E402
from formsnap.core.settings import load_settings  # noqa: E402
from formsnap.core.store import FileStorage  # noqa: E402

app = create_app(storage=FileStorage(load_settings().store_dir))


def main() -> None:
    """Run the API server locally for development."""
    uvicorn.run(
        "formsnap.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=load_settings().log_level.lower(),
    )


if __name__ == "__main__":
    main()
