"""Platform layer: sync engine, transport, downloads and storage."""
