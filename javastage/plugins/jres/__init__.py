"""JREs — Java runtime providers.  OpenJDK is the universal fallback."""
