"""Run the enrollgate server: python3 -m enrollgate"""

import uvicorn

from enrollgate.config import settings


def main() -> None:
    uvicorn.run("enrollgate.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
