"""Lambda runtime, mock-data loading and local HTTP server for the catalog API."""
