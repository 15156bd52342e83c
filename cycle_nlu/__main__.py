import uvicorn

from cycle_nlu.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run("cycle_nlu.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
