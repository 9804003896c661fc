"""
Environment configuration for the Mobile WiFi Server.
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Root of the media file store
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

# Comma-separated browser origins allowed by CORS ("*" allows any)
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
