"""HTTP routes for the device gate."""
