"""Domain layer: orphan record model, ports and workflows."""
