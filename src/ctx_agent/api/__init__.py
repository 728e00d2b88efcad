"""HTTP surface for chat ingestion."""
