"""Shared constants and enums used across the application."""

from enum import IntEnum, StrEnum


class UploadKind(StrEnum):
    """Record kinds accepted by the bulk upload pipeline."""

    QUESTION = "question"
    RESOURCE = "resource"
    RECOMMENDATION = "recommendation"
    USER = "user"


class UserRole(StrEnum):
    """Roles stored on the persisted whitelist."""

    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"


class AuthProvider(StrEnum):
    """Identity providers a whitelisted user may sign in with."""

    GOOGLE = "google"
    EMAIL = "email"


class Difficulty(StrEnum):
    """Question difficulty."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class Topic(StrEnum):
    """Question topic."""

    ANALYTICS = "Analytics"
    PRODUCT = "Product Management"
    FINANCE = "Finance"
    CONSULTING = "Consulting"
    BEHAVIORAL = "Behavioral"
    SQL = "SQL"
    PYTHON = "Python"
    DATA_SCIENCE = "Data Science"
    GENERAL = "General"


class RecommendationSubject(StrEnum):
    """Course subjects faculty recommendations are filed under."""

    PYTHON = "Python"
    R = "R Programming"
    DATA_VIZ = "Data Visualization"
    STATS = "Introduction to Statistics"
    TIME_SERIES = "Time Series Analysis"
    DB = "Database Modelling & Warehousing"
    MARKETING = "Marketing Management"
    PREDICTIVE = "Predictive Analytics"
    DEEP_LEARNING = "Deep Learning For Business"
    HR = "Human Resources"
    NLP = "NLP"
    FINANCE = "Financial Analytics"


class PipelineStatus(StrEnum):
    """Overall status of an upload run."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StepStatus(StrEnum):
    """Status of an individual pipeline step."""

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class Progress(IntEnum):
    """Advisory progress checkpoints reported to the caller (percent)."""

    RESET = 0
    READING = 10
    READ = 40
    PARSED = 60
    RESOLVED = 80
    COMPLETE = 100


# ─── Report messages ──────────────────────────────────
FILE_ERROR_MESSAGE = "Failed to read or parse file."
EMPTY_FILE_MESSAGE = "File is empty or missing header row"
