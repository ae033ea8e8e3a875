"""
Entry point for the Vigilant wellbeing service.

Run with:
    uvicorn main:app --reload --port 3000
    python main.py
"""
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import uvicorn
from config import get_settings
from src.api.main import app  # noqa: F401
from src.cli.vigilant_cli import configure_logging

settings = get_settings()

if __name__ == "__main__":
    configure_logging(settings)
    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
