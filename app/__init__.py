"""Event attendance tracker: QR check-in, cached rosters and live attendance streams."""
