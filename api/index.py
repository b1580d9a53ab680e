import logging

from filemanager import create_app
from filemanager.config import Config

logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))

# Vercel serverless function handler
app = create_app()
