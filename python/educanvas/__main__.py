"""
Run the classroom server: ``python -m educanvas``.
"""

import logging

import uvicorn

from educanvas.config import get_settings
from educanvas.server import ClassroomServer


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    server = ClassroomServer(settings)
    logger = logging.getLogger("educanvas")
    logger.info(f"EduCanvas Live listening on {settings.bind_host}:{settings.bind_port}{settings.ws_path}")
    uvicorn.run(server.app, host=settings.bind_host, port=settings.bind_port)


if __name__ == "__main__":
    main()
