# mailshield/__main__.py
import uvicorn

from .config import Settings
from .main import create_app


def run():
    settings = Settings.from_env()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
