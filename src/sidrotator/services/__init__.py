"""Application services shared by the API layer."""
