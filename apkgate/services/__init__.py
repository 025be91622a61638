"""Services backing the device gate: the registry and APK delivery."""
