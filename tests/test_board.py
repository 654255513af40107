import pytest
from world.board import Board, Cell, LatLng, cell_key, parse_cell_key

def test_canonicalize_returns_same_instance():
    board = Board(tile_width=1e-4, tile_visibility_radius=8)

    for row, col in [(0, 0), (3, -4), (-7, -7), (369894, -1220628)]:
        a = board.canonicalize(row, col)
        b = board.canonicalize(row, col)
        assert a is b
        assert a == Cell(row, col)

    assert board.known_cell_count == 4

def test_distinct_coordinates_are_distinct_cells():
    board = Board(tile_width=1e-4, tile_visibility_radius=8)
    assert board.canonicalize(1, 2) is not board.canonicalize(2, 1)
    assert board.canonicalize(0, -1) != board.canonicalize(0, 1)

def test_cell_for_point_floors_negative_coordinates():
    board = Board(tile_width=0.5, tile_visibility_radius=1)

    # -0.25 tiles must not alias with cell 0
    assert board.cell_for_point(LatLng(-0.25, 0.25)) == Cell(-1, 0)
    assert board.cell_for_point(LatLng(0.25, -0.25)) == Cell(0, -1)
    assert board.cell_for_point(LatLng(-1.0, -1.0)) == Cell(-2, -2)
    assert board.cell_for_point(LatLng(0.0, 0.0)) == Cell(0, 0)

def test_cell_for_point_is_canonical():
    board = Board(tile_width=0.5, tile_visibility_radius=1)
    cell = board.cell_for_point(LatLng(1.2, -3.7))
    assert cell is board.canonicalize(2, -8)

def test_cell_for_point_at_origin():
    board = Board(tile_width=1e-4, tile_visibility_radius=8)
    cell = board.cell_for_point(LatLng(36.98949379578401, -122.06277128548504))
    assert cell == Cell(369894, -1220628)

def test_cell_bounds_anchor_is_south_west_corner():
    board = Board(tile_width=0.5, tile_visibility_radius=1)
    bounds = board.cell_bounds(Cell(2, -3))
    assert bounds.sw == LatLng(1.0, -1.5)
    assert bounds.ne == LatLng(1.5, -1.0)

def test_cell_bounds_contain_their_points():
    board = Board(tile_width=0.25, tile_visibility_radius=1)
    for point in [LatLng(0.1, 0.1), LatLng(-0.1, 0.9), LatLng(-3.3, -2.6), LatLng(5.0, -5.0)]:
        cell = board.cell_for_point(point)
        assert board.cell_bounds(cell).contains(point)

@pytest.mark.parametrize("radius", [0, 1, 2, 8])
@pytest.mark.parametrize("center", [Cell(0, 0), Cell(-5, 3), Cell(369894, -1220628)])
def test_cells_within_is_symmetric_square(center, radius):
    board = Board(tile_width=1e-4, tile_visibility_radius=radius)
    cells = board.cells_within(board.canonicalize(center.row, center.col), radius)

    assert len(cells) == (2 * radius + 1) ** 2
    assert len(set(cells)) == len(cells)
    assert center in cells
    for cell in cells:
        assert abs(cell.row - center.row) <= radius
        assert abs(cell.col - center.col) <= radius
        assert cell is board.canonicalize(cell.row, cell.col)

def test_cells_near_point_uses_visibility_radius():
    board = Board(tile_width=1.0, tile_visibility_radius=2)
    cells = board.cells_near_point(LatLng(-0.5, 10.5))
    assert len(cells) == 25
    rows = {c.row for c in cells}
    cols = {c.col for c in cells}
    assert rows == {-3, -2, -1, 0, 1}
    assert cols == {8, 9, 10, 11, 12}

def test_cell_key_round_trip():
    assert cell_key(Cell(3, -4)) == "3,-4"
    assert parse_cell_key("3,-4") == (3, -4)
    with pytest.raises(ValueError):
        parse_cell_key("3;-4")
