"""Models Package - Export all enums for easy imports"""

from app.models.enums import *
