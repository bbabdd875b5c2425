"""
Run the API server: python -m api (from repo root, with .env or env vars set).
"""
import uvicorn

from contactbook.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
