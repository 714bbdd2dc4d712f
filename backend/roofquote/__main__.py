"""Run the API with uvicorn: ``python -m roofquote``."""

import uvicorn

from roofquote.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("roofquote.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)


if __name__ == "__main__":
    main()
