"""Run the pkeeper server: python -m api"""

import logging

import uvicorn

from api.main import create_app
from config import Config, resolve_http_addr

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def main() -> None:
    host, port = resolve_http_addr(Config.server_url())
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
