"""Static reference data bundled with the portal."""
