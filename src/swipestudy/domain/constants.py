"""Centralized constants for the SwipeStudy core.

Scheduling and session defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
MS_PER_DAY = 24 * 60 * 60 * 1000

# ---------- Mastery ----------
MASTERY_THRESHOLD = 3
MIN_MASTERY_SCORE = 0

# ---------- Spaced Scheduling ----------
FIRST_INTERVAL_DAYS = 1
RELEARN_INTERVAL_DAYS = 1
INTERVAL_GROWTH_FACTOR = 2

# ---------- Learn Sessions ----------
DEFAULT_ITEM_COUNT = 10
DEFAULT_QUESTION_TYPES = ["written"]

# ---------- Folders ----------
DEFAULT_FOLDER_ID = "f1"
DEFAULT_FOLDER_NAME = "General Notes"
DEFAULT_FOLDER_COLOR = "indigo"

# ---------- Persistence Keys ----------
CARDS_KEY = "cards"
FOLDERS_KEY = "folders"
