# tests/test_board.py

import pytest

from taskflow.client.api import MoveResult
from taskflow.client.board import BoardReconciler, BoardState, Move, apply_optimistic, reconcile
from taskflow.errors import NotFoundError, TransientError
from taskflow.schemas import TASK_STATUSES


def _task(task_id: int, status: str, order: int) -> dict:
    return {"id": task_id, "title": f"T{task_id}", "status": status, "order": order, "completedAt": None}


def _board(sizes: dict[str, int]) -> BoardState:
    """Board with sequential ids, e.g. {'backlog': 3, 'done': 1}."""
    next_id = 1
    columns = {}
    for status in TASK_STATUSES:
        columns[status] = []
        for position in range(sizes.get(status, 0)):
            columns[status].append(_task(next_id, status, position))
            next_id += 1
    return BoardState(columns)


def _orders(state: BoardState, column: str) -> list[int]:
    return [t["order"] for t in state.columns[column]]


class FakeApi:
    """Stands in for TaskflowClient: scripted move results and a fixed server board."""

    def __init__(self, server_board: dict, result: MoveResult | None = None, kanban_error=None):
        self.server_board = server_board
        self.result = result or MoveResult(ok=True)
        self.kanban_error = kanban_error
        self.moves: list[tuple] = []

    def get_kanban(self) -> dict:
        if self.kanban_error:
            raise self.kanban_error
        return self.server_board

    def move_task(self, task_id, status, order) -> MoveResult:
        self.moves.append((task_id, status, order))
        return self.result


class TestApplyOptimistic:
    def test_same_column_same_index_is_noop(self):
        board = _board({"backlog": 3})
        after = apply_optimistic(board, Move(2, "backlog", 1, "backlog", 1))
        assert after is board

    def test_move_across_columns(self):
        board = _board({"backlog": 2, "done": 2})
        after = apply_optimistic(board, Move(1, "backlog", 0, "done", 1))

        assert after.ids("backlog") == [2]
        assert after.ids("done") == [3, 1, 4]
        assert _orders(after, "done") == [0, 1, 2]
        assert _orders(after, "backlog") == [0]
        assert after.columns["done"][1]["status"] == "done"

    def test_reorder_within_column(self):
        board = _board({"in-progress": 4})
        after = apply_optimistic(board, Move(1, "in-progress", 0, "in-progress", 3))
        assert after.ids("in-progress") == [2, 3, 4, 1]
        assert _orders(after, "in-progress") == [0, 1, 2, 3]

    def test_destination_index_is_clamped(self):
        board = _board({"backlog": 1, "in-review": 2})
        after = apply_optimistic(board, Move(1, "backlog", 0, "in-review", 99))
        assert after.ids("in-review")[-1] == 1
        assert _orders(after, "in-review") == [0, 1, 2]

        after = apply_optimistic(board, Move(1, "backlog", 0, "in-review", -5))
        assert after.ids("in-review")[0] == 1

    def test_input_board_is_not_mutated(self):
        board = _board({"backlog": 2, "done": 1})
        before = board.copy()
        apply_optimistic(board, Move(1, "backlog", 0, "done", 0))
        assert board == before

    def test_every_valid_move_leaves_dense_orders(self):
        sizes = {"backlog": 2, "in-progress": 3, "in-review": 0, "done": 1}
        board = _board(sizes)
        for source in TASK_STATUSES:
            for source_index, task in enumerate(board.columns[source]):
                for dest in TASK_STATUSES:
                    remaining = sizes[dest] - (1 if dest == source else 0)
                    for dest_index in range(remaining + 1):
                        after = apply_optimistic(board, Move(task["id"], source, source_index, dest, dest_index))
                        assert _orders(after, dest) == list(range(len(after.columns[dest])))
                        assert after.columns[dest][dest_index]["id"] == task["id"]

    @pytest.mark.parametrize("move", [
        Move(1, "backlog", 5, "done", 0),
        Move(1, "nope", 0, "done", 0),
        Move(1, "backlog", 0, "inProgress", 0),
        Move(99, "backlog", 0, "done", 0),
    ])
    def test_invalid_moves_are_rejected(self, move):
        with pytest.raises(ValueError):
            apply_optimistic(_board({"backlog": 1}), move)


class TestReconcile:
    def test_success_keeps_optimistic_board_with_server_task(self):
        board = apply_optimistic(_board({"backlog": 1}), Move(1, "backlog", 0, "done", 0))
        server_task = {**board.columns["done"][0], "completedAt": "2024-01-01T00:00:00Z"}

        final = reconcile(board, MoveResult(ok=True, task=server_task), refetch=pytest.fail)

        assert final.ids("done") == [1]
        assert final.columns["done"][0]["completedAt"] == "2024-01-01T00:00:00Z"

    def test_success_keeps_local_order_when_server_order_differs(self):
        board = apply_optimistic(_board({"backlog": 1, "done": 3}), Move(1, "backlog", 0, "done", 3))
        # the server's done column was shorter, so it clamped the order
        server_task = {**board.columns["done"][3], "order": 1}

        final = reconcile(board, MoveResult(ok=True, task=server_task), refetch=pytest.fail)

        assert _orders(final, "done") == [0, 1, 2, 3]

    def test_failure_replaces_board_with_refetch(self):
        board = apply_optimistic(_board({"backlog": 2}), Move(1, "backlog", 0, "done", 0))
        fresh = _board({"backlog": 2})

        final = reconcile(board, MoveResult(ok=False, error=TransientError("boom")), refetch=lambda: fresh)

        assert final is fresh


class TestBoardReconciler:
    def test_successful_move_sends_destination_and_index(self):
        server = _board({"backlog": 2}).columns
        api = FakeApi(server)
        reconciler = BoardReconciler(api)
        reconciler.refresh()

        state = reconciler.move_task(2, "backlog", 1, "in-review", 0)

        assert api.moves == [(2, "in-review", 0)]
        assert state.ids("in-review") == [2]
        assert state.ids("backlog") == [1]

    def test_noop_move_makes_no_request(self):
        api = FakeApi(_board({"backlog": 1}).columns)
        reconciler = BoardReconciler(api)
        reconciler.refresh()

        reconciler.move_task(1, "backlog", 0, "backlog", 0)

        assert api.moves == []

    @pytest.mark.parametrize("error", [NotFoundError("Task not found"), TransientError("connection reset")])
    def test_failed_move_snaps_back_to_server_board(self, error):
        server = _board({"backlog": 2, "done": 1}).columns
        api = FakeApi(server, result=MoveResult(ok=False, error=error))
        reconciler = BoardReconciler(api)
        reconciler.refresh()

        with pytest.raises(type(error)):
            reconciler.move_task(1, "backlog", 0, "done", 0)

        assert reconciler.state == BoardState.from_kanban(server)

    def test_failed_refetch_restores_last_confirmed_board(self):
        server = _board({"backlog": 2}).columns
        api = FakeApi(server, result=MoveResult(ok=False, error=TransientError("boom")))
        reconciler = BoardReconciler(api)
        confirmed = reconciler.refresh()

        api.kanban_error = TransientError("still down")
        with pytest.raises(TransientError):
            reconciler.move_task(1, "backlog", 0, "done", 0)

        assert reconciler.state == confirmed

    def test_unexpected_move_exception_still_refetches(self):
        server = _board({"backlog": 2}).columns

        class ExplodingApi(FakeApi):
            def move_task(self, task_id, status, order):
                raise RuntimeError("unexpected payload")

        reconciler = BoardReconciler(ExplodingApi(server))
        reconciler.refresh()

        with pytest.raises(TransientError):
            reconciler.move_task(1, "backlog", 0, "done", 0)

        assert reconciler.state == BoardState.from_kanban(server)
