"""Commons package - settings, telemetry and shared infrastructure clients."""
