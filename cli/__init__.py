"""Interactive client for uploading recordings and resolving references."""
