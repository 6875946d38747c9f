"""Upload service: gist container client, upload orchestrator and HTTP API."""
