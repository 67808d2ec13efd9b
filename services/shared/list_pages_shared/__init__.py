"""Shared configuration, logging and persistence for the list pages service."""
