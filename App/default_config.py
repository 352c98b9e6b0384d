SQLALCHEMY_DATABASE_URI = "sqlite:///andrino-academy.db"
SECRET_KEY = "change-me-in-production"
ENV = "development"
SERVICE_NAME = "andrino-academy-availability"
LOG_LEVEL = "INFO"

# Origins allowed to call /api/* (the Next.js front end)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
