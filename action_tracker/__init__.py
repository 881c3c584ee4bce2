"""Corrective action tracker: a FastAPI + SQLModel CRUD service."""

__version__ = "0.1.0"
