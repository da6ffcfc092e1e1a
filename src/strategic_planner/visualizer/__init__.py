"""Rich terminal views for strategic plans."""
