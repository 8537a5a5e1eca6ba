from taskflow.client.api import TaskflowClient, MoveResult
from taskflow.client.board import BoardState, BoardReconciler, Move, apply_optimistic, reconcile

__all__ = [
    "TaskflowClient",
    "MoveResult",
    "BoardState",
    "BoardReconciler",
    "Move",
    "apply_optimistic",
    "reconcile",
]
