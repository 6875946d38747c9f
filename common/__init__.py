"""Pure chunking, reference and playback helpers shared by the service and the CLI."""
