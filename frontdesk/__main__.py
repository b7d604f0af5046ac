"""Run the HTTP service: `python -m frontdesk`."""

import uvicorn

from frontdesk.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "frontdesk.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
