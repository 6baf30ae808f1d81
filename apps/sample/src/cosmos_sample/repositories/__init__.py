"""Repositories of the sample application."""

from cosmos_sample.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
