"""
Run FastAPI HTTP Server

Starts the job tracker API and WebSocket server.
"""

import uvicorn
from jobtracker.config import get_config

if __name__ == "__main__":
    config = get_config()

    uvicorn.run(
        "jobtracker.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=False,  # Disable reload for production
        log_level=config.LOG_LEVEL.lower(),
    )
