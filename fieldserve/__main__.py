import uvicorn

from .config import settings
from .main import create_app


def main() -> None:
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
