"""HTTP surface for contactbook (FastAPI)."""
