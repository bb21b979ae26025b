"""Run the chefbot api.

Run:
    python main.py
or:
    uvicorn main:app
"""

import uvicorn

from app.app import create_app
from app.config import Config
from app.logs import configure_logging


CONFIG = Config()

configure_logging(CONFIG.log_level)

app = create_app(CONFIG)


if __name__ == "__main__":
    uvicorn.run(app, host=CONFIG.host, port=CONFIG.port, log_config=None)
