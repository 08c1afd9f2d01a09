"""Application layer - Lifecycle manager, service facade, and port definitions.

This layer contains:
- Lifecycle Manager: payment creation, listing, and race-safe confirmation
- Service: facade turning domain failures into explicit error kinds
- Ports: Abstract interfaces (ABCs) for storage, time, and locking
- DTOs: Data transfer objects for the facade's output

The application layer depends only on the domain layer.
Infrastructure implementations are injected via ports.
"""
