"""Spotify, Twitch and chat services."""
