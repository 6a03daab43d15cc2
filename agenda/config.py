# -*- coding: utf-8 -*-
"""Runtime settings, read from environment variables with local defaults."""
import os
from pathlib import Path

# Durable key-value blob holding events, last view and teacher profile
DATA_PATH = Path(
    os.getenv("PROFEIA_DATA_PATH", str(Path.home() / ".profeia" / "storage.json"))
).expanduser()

# Storage keys
EVENTS_KEY = "profeia-events"
APP_VIEW_KEY = "profeia-appView"
USER_CONFIG_KEY = "profeia-userConfig"

# Voice reminders
LOCALE = os.getenv("PROFEIA_LOCALE", "es-AR")
REMINDER_INTERVAL = float(os.getenv("PROFEIA_REMINDER_INTERVAL", "60"))

LOG_LEVEL = os.getenv("PROFEIA_LOG_LEVEL", "WARNING")

# REST service
AGENDA_SERVICE_PORT = int(os.getenv("AGENDA_SERVICE_PORT", "8003"))
