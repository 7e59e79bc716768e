# main.py
from dotenv import load_dotenv
load_dotenv()

from carpool.core.config import load_settings
from carpool.core.logging import setup_logging
from carpool.server import create_app

settings = load_settings()
setup_logging(settings.log_level)

app = create_app(settings)
