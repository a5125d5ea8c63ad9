import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///remedial.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Minimum overall average on a completed session to record mastery
    MASTERY_THRESHOLD = float(os.getenv("MASTERY_THRESHOLD", "80"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
