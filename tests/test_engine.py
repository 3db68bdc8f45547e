import pytest

from connectevo.engine import (
    COLS,
    ROWS,
    WINDOWS,
    Board,
    Player,
    board_from_rows,
    deserialize_board,
    serialize_board,
)

EMPTY_ROW = "......."


def test_new_board_is_empty():
    board = Board()
    assert board.piece_count() == 0
    assert board.legal_columns() == list(range(COLS))
    assert not board.is_full()
    assert board.winner() is None


def test_window_count_covers_all_orientations():
    # 24 horizontal + 21 vertical + 12 + 12 diagonal
    assert len(WINDOWS) == 69


def test_drop_fills_from_bottom():
    board = Board()
    assert board.drop(2, Player.ONE) == ROWS - 1
    assert board.drop(2, Player.TWO) == ROWS - 2
    assert board.cell(ROWS - 1, 2) == Player.ONE
    assert board.cell(ROWS - 2, 2) == Player.TWO
    assert board.lowest_empty_row(2) == ROWS - 3


def test_column_becomes_invalid_exactly_when_full():
    board = Board()
    for height in range(1, ROWS + 1):
        assert board.is_valid_move(4)
        board.drop(4, Player.ONE if height % 2 else Player.TWO)
    assert not board.is_valid_move(4)
    assert board.lowest_empty_row(4) is None


def test_drop_into_full_or_out_of_range_column_is_noop():
    board = Board()
    for _ in range(ROWS):
        board.drop(0, Player.ONE)
    before = board.copy()
    assert board.drop(0, Player.TWO) is None
    assert board.drop(-1, Player.TWO) is None
    assert board.drop(COLS, Player.TWO) is None
    assert board == before


def test_is_valid_move_rejects_out_of_range():
    board = Board()
    assert not board.is_valid_move(-1)
    assert not board.is_valid_move(COLS)


def test_copy_is_independent():
    board = Board()
    board.drop(3, Player.ONE)
    clone = board.copy()
    clone.drop(3, Player.TWO)
    assert board.piece_count() == 1
    assert clone.piece_count() == 2


def test_reset_clears_in_place():
    board = Board()
    board.drop(1, Player.ONE)
    board.reset()
    assert board.piece_count() == 0


def test_horizontal_win():
    board = board_from_rows([EMPTY_ROW] * 5 + [".XXXX.."])
    assert board.check_win(Player.ONE)
    assert not board.check_win(Player.TWO)


def test_vertical_win():
    board = board_from_rows(
        [EMPTY_ROW, EMPTY_ROW, "X......", "X......", "X......", "XOOO..."]
    )
    assert board.check_win(Player.ONE)
    assert not board.check_win(Player.TWO)


def test_vertical_win_at_bottom():
    board = board_from_rows([EMPTY_ROW, EMPTY_ROW, "O......", "O......", "O......", "O......"])
    assert board.check_win(Player.TWO)


def test_diagonal_down_right_win():
    board = board_from_rows(
        [
            EMPTY_ROW,
            EMPTY_ROW,
            "X......",
            "OX.....",
            "OOX....",
            "OOOX...",
        ]
    )
    assert board.check_win(Player.ONE)
    assert not board.check_win(Player.TWO)


def test_diagonal_up_right_win():
    board = board_from_rows(
        [
            EMPTY_ROW,
            EMPTY_ROW,
            "......X",
            ".....XO",
            "....XOO",
            "...XOOO",
        ]
    )
    assert board.check_win(Player.ONE)
    assert not board.check_win(Player.TWO)


@pytest.mark.parametrize(
    "bottom",
    [
        "XXXO...",
        "XXX.X..",
        "XX.XX..",
        ".XXXOXX",
    ],
)
def test_three_with_gap_is_not_a_win(bottom):
    board = board_from_rows([EMPTY_ROW] * 5 + [bottom])
    assert not board.check_win(Player.ONE)


def test_broken_vertical_is_not_a_win():
    board = board_from_rows(
        [EMPTY_ROW, "X......", "O......", "X......", "X......", "X......"]
    )
    assert not board.check_win(Player.ONE)


def _draw_board() -> Board:
    return board_from_rows(
        [
            "XOXOXOX",
            "XOXOXOX",
            "OXOXOXO",
            "OXOXOXO",
            "XOXOXOX",
            "XOXOXOX",
        ]
    )


def test_full_board_without_four_is_draw():
    board = _draw_board()
    assert board.is_full()
    assert board.winner() is None
    assert board.is_draw()
    assert board.is_terminal()
    assert board.legal_columns() == []
    assert board.ordered_legal_columns() == []


def test_ordered_legal_columns_are_center_out():
    board = Board()
    assert board.ordered_legal_columns() == [3, 2, 4, 1, 5, 0, 6]
    for _ in range(ROWS):
        board.drop(3, Player.ONE)
    assert board.ordered_legal_columns() == [2, 4, 1, 5, 0, 6]


def test_board_from_rows_rejects_floating_pieces():
    with pytest.raises(ValueError, match="Floating"):
        board_from_rows([EMPTY_ROW] * 4 + ["X......", EMPTY_ROW])


def test_board_from_rows_rejects_bad_shape_and_symbols():
    with pytest.raises(ValueError):
        board_from_rows([EMPTY_ROW] * 5)
    with pytest.raises(ValueError):
        board_from_rows([EMPTY_ROW] * 5 + ["XX?...."])


def test_serialize_reports_status():
    board = board_from_rows([EMPTY_ROW] * 5 + [".XXXX.."])
    payload = serialize_board(board)
    assert payload["winner"] == 1
    assert payload["draw"] is False
    assert payload["legal"] == list(range(COLS))
    assert deserialize_board(payload) == board


def test_deserialize_rejects_invalid_cells():
    payload = serialize_board(Board())
    payload["rows"][ROWS - 1][0] = 7
    with pytest.raises(ValueError):
        deserialize_board(payload)
