"""Reference HTTP API for pingcrm (FastAPI, in-memory)."""
