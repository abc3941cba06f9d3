import logging
from typing import Optional

import uvicorn

from services.search.app import app
from services.search.config import load_server_config


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    config = load_server_config()
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=host or config.host, port=port or config.port)


if __name__ == "__main__":
    run()
