"""Nova Defense application layer: settings and the session runner."""
