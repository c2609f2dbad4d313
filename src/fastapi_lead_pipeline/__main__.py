"""Run the API with uvicorn: ``python -m fastapi_lead_pipeline``."""

from __future__ import annotations

import os

import uvicorn

from fastapi_lead_pipeline.app import create_app
from fastapi_lead_pipeline.config import get_settings
from fastapi_lead_pipeline.observability import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    uvicorn.run(
        create_app(settings),
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
        log_config=None,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
