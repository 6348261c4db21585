"""Buchungs-Kern: Prüfkette (validation), Bestand (store), Auto-Save (autosave)."""
