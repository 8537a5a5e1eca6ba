"""TaskFlow: Kanban task and todo tracking API with a board-syncing client."""

__version__ = "1.0.0"
