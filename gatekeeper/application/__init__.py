"""Application layer: ports, DTOs, and the authorization services."""
