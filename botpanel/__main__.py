"""Run the dashboard server with uvicorn"""

import uvicorn

from botpanel.config import settings


def main():
    uvicorn.run("botpanel.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
