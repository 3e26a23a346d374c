# /backend/main.py
import uvicorn

from beer_sim.core.config import settings
from beer_sim.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
