"""
Application Layer

Orchestrates domain objects and infrastructure adapters.

Structure:
- interfaces/: Port interfaces for infrastructure adapters
- services/: Playback controller, interrupt manager and session registry
"""
