import os

from dotenv import load_dotenv

# local | development | testing | staging | production
ENVIRONMENT = os.getenv("ENVIRONMENT", "local").lower()
ENV_FILE = os.getenv("ENV_FILE", f".env.{ENVIRONMENT}")

# Variables already set in the process environment win over the file
if os.path.isfile(ENV_FILE):
    load_dotenv(dotenv_path=ENV_FILE, override=False)

__all__ = ["ENVIRONMENT", "ENV_FILE"]
