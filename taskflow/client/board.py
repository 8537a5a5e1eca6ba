"""
board.py — Client-side Kanban board state and move reconciliation.

A move is applied locally first (apply_optimistic), then sent to the API.
The server answer decides the final state (reconcile): a confirmed move keeps
the optimistic board, anything else throws it away and refetches the board.
There is no partial rollback.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable

from taskflow.client.api import MoveResult
from taskflow.errors import TaskflowError, TransientError
from taskflow.schemas import TASK_STATUSES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Move:
    task_id: int
    source_column: str
    source_index: int
    dest_column: str
    dest_index: int

    @property
    def is_noop(self) -> bool:
        return self.source_column == self.dest_column and self.source_index == self.dest_index


@dataclass
class BoardState:
    columns: dict[str, list[dict]] = field(default_factory=lambda: {c: [] for c in TASK_STATUSES})

    @classmethod
    def from_kanban(cls, data: dict) -> "BoardState":
        """Build from a GET /tasks/kanban payload."""
        return cls({c: [dict(t) for t in data.get(c, [])] for c in TASK_STATUSES})

    def copy(self) -> "BoardState":
        return BoardState({c: [dict(t) for t in tasks] for c, tasks in self.columns.items()})

    def find(self, task_id) -> tuple[str, int] | None:
        for column, tasks in self.columns.items():
            for index, task in enumerate(tasks):
                if task.get("id") == task_id:
                    return column, index
        return None

    def ids(self, column: str) -> list:
        return [t.get("id") for t in self.columns[column]]


def _renumber(tasks: list[dict]):
    for position, task in enumerate(tasks):
        task["order"] = position


def apply_optimistic(state: BoardState, move: Move) -> BoardState:
    """
    Return a new board with the move applied. The input board is not touched.
    Both affected columns get order = array position afterwards.
    """
    if move.is_noop:
        return state
    for column in (move.source_column, move.dest_column):
        if column not in state.columns:
            raise ValueError(f"Unknown column: {column}")

    source_tasks = state.columns[move.source_column]
    if not 0 <= move.source_index < len(source_tasks):
        raise ValueError(f"No task at {move.source_column}[{move.source_index}]")
    if source_tasks[move.source_index].get("id") != move.task_id:
        raise ValueError(f"Task {move.task_id} is not at {move.source_column}[{move.source_index}]")

    board = state.copy()
    source = board.columns[move.source_column]
    task = source.pop(move.source_index)
    task["status"] = move.dest_column

    dest = board.columns[move.dest_column]
    index = max(0, min(move.dest_index, len(dest)))
    dest.insert(index, task)

    _renumber(dest)
    if source is not dest:
        _renumber(source)
    return board


def reconcile(state: BoardState, result, refetch: Callable[[], BoardState]) -> BoardState:
    """
    Final board after the server answered a move.
    Success keeps the optimistic board with the server's copy of the task
    swapped in; failure discards it for whatever refetch() returns.
    """
    if not result.ok:
        return refetch()
    state = state.copy()
    if result.task:
        found = state.find(result.task.get("id"))
        if found:
            column, index = found
            # the local column decides position; the server copy may carry a clamped order
            state.columns[column][index] = dict(result.task, order=index)
    return state


class BoardReconciler:
    """
    Owns the client's board and routes every change through move_task().
    One move in flight at a time; concurrent edits by other clients are
    only picked up on the next refresh.
    """

    def __init__(self, api, state: BoardState | None = None):
        self.api = api
        self.state = state or BoardState()

    def _fetch(self) -> BoardState:
        return BoardState.from_kanban(self.api.get_kanban())

    def refresh(self) -> BoardState:
        self.state = self._fetch()
        return self.state

    def move_task(self, task_id, from_column: str, from_index: int, to_column: str, to_index: int) -> BoardState:
        """
        Apply the move locally, send it, then settle on the server's view.
        Raises the move's error after the board has been refetched; if the
        refetch fails as well the last confirmed board is restored.
        """
        move = Move(task_id, from_column, from_index, to_column, to_index)
        if move.is_noop:
            return self.state

        confirmed = self.state
        self.state = apply_optimistic(confirmed, move)

        try:
            result = self.api.move_task(task_id, to_column, to_index)
        except Exception as e:
            logger.warning("Move of task %s raised %s", task_id, e)
            result = MoveResult(ok=False, error=TransientError(f"Move of task {task_id} failed: {e}"))
        try:
            self.state = reconcile(self.state, result, self._fetch)
        except TaskflowError:
            logger.error("Refetch after failed move of task %s failed; restoring last confirmed board", task_id)
            self.state = confirmed
            raise

        if not result.ok:
            logger.warning("Move of task %s rejected, board refetched", task_id)
            raise result.error or TransientError("Move failed")
        return self.state
