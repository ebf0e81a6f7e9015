"""Bouncing box pixel-buffer demo."""
