"""Kling image-to-video proxy for the Freepik API."""
