"""Telemetry helpers: in-process claim counters and OpenTelemetry setup."""
