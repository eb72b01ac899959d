# memelinks/__main__.py
# python -m memelinks

import uvicorn

from memelinks.config import get_settings
from memelinks.main import create_app


def main():
    settings = get_settings()
    # Logging is configured in the app lifespan; keep uvicorn from replacing it
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
