"""Run the face service with uvicorn: python -m api"""
import uvicorn

from api.main import app
from settings import settings


def main() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
