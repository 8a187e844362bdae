import os
from dotenv import load_dotenv

# Values already exported in the environment win over the .env file
load_dotenv(override=False)

SQLALCHEMY_DATABASE_URL = os.getenv("SQLALCHEMY_DATABASE_URL", "sqlite:///./walking_tracker.db")
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")  # Use a strong random string
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

# External exercise catalog (API Ninjas compatible)
FITNESS_API_KEY = os.getenv("FITNESS_API_KEY")
FITNESS_API_URL = os.getenv("FITNESS_API_URL", "https://api.api-ninjas.com/v1")
FITNESS_API_TIMEOUT = float(os.getenv("FITNESS_API_TIMEOUT", "10.0"))

# Plan generation
DEFAULT_PLAN_WEEKS = int(os.getenv("DEFAULT_PLAN_WEEKS", "4"))
MAX_PLAN_WEEKS = int(os.getenv("MAX_PLAN_WEEKS", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
