"""Media catalog service package."""
