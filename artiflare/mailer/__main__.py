"""``python -m artiflare.mailer`` — serve the mailer with uvicorn."""

import uvicorn

from artiflare.config import get_settings
from artiflare.log import configure_logging
from artiflare.mailer._api import create_app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.mailer_host, port=settings.mailer_port)


if __name__ == "__main__":
    main()
