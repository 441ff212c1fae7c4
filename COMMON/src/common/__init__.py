"""Shared configuration, logging, CLI and file classification utilities."""
