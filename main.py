"""
Production entrypoint for the Proofly order engine.

Binds to 0.0.0.0:$PORT.
"""

import logging

import uvicorn

from utils.config import Config

if __name__ == "__main__":
    config = Config.load()
    logging.basicConfig(level=config.logging_level)

    port = config.port
    logging.getLogger("proofly").info("Starting Proofly order engine on port %d", port)

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port)
